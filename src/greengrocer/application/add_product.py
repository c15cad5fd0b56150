"""Application service: Add Product use case."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from greengrocer.application.dto import ProductDTO
from greengrocer.application.mapping import product_to_dto
from greengrocer.domain.exceptions import ErrorReason, ValidationError
from greengrocer.domain.model.product import Category, Product
from greengrocer.domain.model.value_objects import Money
from greengrocer.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        name: str,
        category: str,
        price: str,
        stock: str,
        threshold: str,
    ) -> ProductDTO:
        """Add a new product to the catalog."""
        if name and self._product_repo.get_by_name(name.strip()) is not None:
            raise ValidationError(f"Product '{name.strip()}' already exists")

        product = Product.create(
            product_id=self._product_repo.next_id(),
            name=name,
            category=parse_category(category),
            price=Money.of(price),
            stock_kg=parse_kg(stock),
            threshold_kg=parse_kg(threshold),
        )
        self._product_repo.save(product)
        return product_to_dto(product)


class ListProductsHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, category: str | None = None, in_stock_only: bool = False) -> list[ProductDTO]:
        products = self._product_repo.list_all()
        if category is not None:
            wanted = parse_category(category)
            products = [p for p in products if p.category == wanted]
        if in_stock_only:
            products = [p for p in products if not p.is_out_of_stock]
        return [product_to_dto(p) for p in sorted(products, key=lambda p: p.name.lower())]


def parse_category(raw: str) -> Category:
    try:
        return Category(raw.strip().upper())
    except ValueError as exc:
        raise ValidationError(f"Unknown category '{raw}' (expected VEGETABLE or FRUIT)") from exc


def parse_kg(raw: str | Decimal) -> Decimal:
    try:
        kg = Decimal(str(raw))
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid weight: {raw!r}", ErrorReason.INVALID_QUANTITY) from exc
    if not kg.is_finite():
        raise ValidationError(f"Invalid weight: {raw!r}", ErrorReason.INVALID_QUANTITY)
    return kg
