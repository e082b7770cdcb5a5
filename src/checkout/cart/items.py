"""Cart management — commands and handler."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from checkout.cart.cart import Cart
from checkout.domain import checkout


@checkout.command(part_of="Cart")
class CreateCart:
    """Create a new cart for a registered customer or a guest."""

    customer_id = Identifier()  # Optional for guest carts


@checkout.command(part_of="Cart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    author = String(max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    cover_image = String(max_length=1000)
    quantity = Integer(required=True, min_value=1)


@checkout.command(part_of="Cart")
class UpdateCartQuantity:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    new_quantity = Integer(required=True, min_value=1)


@checkout.command(part_of="Cart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


@checkout.command(part_of="Cart")
class ClearCart:
    cart_id = Identifier(required=True)


@checkout.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = Cart.create(customer_id=command.customer_id)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.add_item(
            product_id=command.product_id,
            title=command.title,
            author=command.author,
            unit_price=command.unit_price,
            cover_image=command.cover_image,
            quantity=command.quantity,
        )
        repo.add(cart)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.update_item_quantity(
            item_id=command.item_id,
            new_quantity=command.new_quantity,
        )
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.remove_item(item_id=command.item_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.clear()
        repo.add(cart)
