"""Product registration: command and handler.

Catalogue CRUD is owned by the catalogue service; this command only seeds
the products the ordering service prices and reserves against.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product
from ordering.domain import ordering


@ordering.command(part_of="Product")
class RegisterProduct:
    product_id = Identifier()  # Optional: generated when absent
    title = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.01)
    stock = Integer(required=True, min_value=0)


@ordering.command_handler(part_of=Product)
class RegisterProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        attributes = {
            "title": command.title,
            "price": command.price,
            "stock": command.stock,
        }
        if command.product_id:
            attributes["id"] = command.product_id

        product = Product(**attributes)
        current_domain.repository_for(Product).add(product)
        return str(product.id)
