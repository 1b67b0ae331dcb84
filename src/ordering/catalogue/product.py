"""Product aggregate: the stock-relevant slice of the catalogue.

Catalogue management (descriptions, images, categories) lives elsewhere.
The ordering service only needs the authoritative price and title at the
moment an order is placed, and the stock counter that the Stock Ledger
reserves against.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import ProductNotFound

logger = structlog.get_logger(__name__)


@ordering.aggregate
class Product:
    title = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.01)
    # Mutated only through StockLedger conditional updates
    stock = Integer(required=True, min_value=0)
    created_at = DateTime(default=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class ProductSnapshot:
    """Price, title and stock of a product as read at a single instant."""

    product_id: str
    title: str
    price: float
    stock: int


class CatalogueLookup:
    """Resolves product identifiers to their authoritative catalogue data."""

    def resolve(self, product_id) -> ProductSnapshot:
        try:
            product = current_domain.repository_for(Product).get(product_id)
        except ObjectNotFoundError:
            logger.info("Product lookup missed", product_id=str(product_id))
            raise ProductNotFound(product_id) from None

        return ProductSnapshot(
            product_id=str(product.id),
            title=product.title,
            price=product.price,
            stock=product.stock,
        )
