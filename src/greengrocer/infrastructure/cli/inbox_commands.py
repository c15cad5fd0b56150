"""CLI command for reading notifications."""

from __future__ import annotations

import click

from greengrocer.application.mapping import TIME_FORMAT
from greengrocer.domain.notifier import RecipientRole
from greengrocer.infrastructure.bootstrap import notifier


@click.command("list")
@click.option(
    "--role",
    required=True,
    type=click.Choice([r.value for r in RecipientRole], case_sensitive=False),
    help="Whose inbox to read.",
)
@click.option("--user", "user_id", default=None, help="Recipient user ID.")
def inbox_list(role: str, user_id: str | None) -> None:
    """Show messages, newest first."""
    messages = notifier().list_messages(RecipientRole(role.upper()), user_id)

    if not messages:
        click.echo("Inbox is empty.")
        return

    for message in messages:
        click.echo(f"[{message.created_at.strftime(TIME_FORMAT)}] {message.subject}")
        for line in message.body.splitlines():
            click.echo(f"    {line}")
        click.echo()
