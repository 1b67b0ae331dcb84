"""Cart validation and pricing.

Carts arrive from untrusted clients. ``validate_cart`` checks the whole
payload up front and reports every problem at once; ``OrderBuilder`` then
prices the surviving lines from the catalogue. Client-supplied prices and
titles are never read.
"""

from dataclasses import dataclass

from protean.exceptions import ValidationError

from ordering.catalogue.product import CatalogueLookup


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_cart(raw_items) -> list[CartLine]:
    """Check a raw cart payload and return its normalised lines.

    Accepts ``product_id`` or ``productId`` on each line. Raises a single
    ``ValidationError`` listing every missing or invalid field.
    """
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError({"items": ["At least one item is required"]})

    errors = {}
    lines = []
    for index, raw in enumerate(raw_items):
        prefix = f"items[{index}]"
        if not isinstance(raw, dict):
            errors[prefix] = ["Item must be an object"]
            continue

        product_id = raw.get("product_id", raw.get("productId"))
        quantity = raw.get("quantity")

        if product_id is None or not str(product_id).strip():
            errors[f"{prefix}.product_id"] = ["Product id is required"]
        if quantity is None:
            errors[f"{prefix}.quantity"] = ["Quantity is required"]
        elif not _is_positive_int(quantity):
            errors[f"{prefix}.quantity"] = ["Quantity must be a positive integer"]

        if not any(key.startswith(prefix) for key in errors):
            lines.append(CartLine(product_id=str(product_id).strip(), quantity=quantity))

    if errors:
        raise ValidationError(errors)

    return lines


class OrderBuilder:
    """Turns validated cart lines into priced line snapshots."""

    def __init__(self, lookup: CatalogueLookup | None = None) -> None:
        self.lookup = lookup or CatalogueLookup()

    def price(self, lines: list[CartLine]) -> list[dict]:
        priced = []
        for line in lines:
            snapshot = self.lookup.resolve(line.product_id)
            priced.append(
                {
                    "product_id": snapshot.product_id,
                    "title": snapshot.title,
                    "unit_price": snapshot.price,
                    "quantity": line.quantity,
                }
            )
        return priced
