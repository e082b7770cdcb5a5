"""Cart aggregate — the books a customer is about to buy.

The checkout session never owns the cart. It holds the cart's identity,
reads its lines to price the order, and clears it exactly once after an
order has been placed successfully.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from checkout.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from checkout.domain import checkout


@checkout.entity(part_of="Cart")
class CartItem:
    """A book in the cart, with the price captured when it was added."""

    product_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    author = String(max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    cover_image = String(max_length=1000)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@checkout.aggregate
class Cart:
    customer_id = Identifier()  # Nullable for guest carts
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id=None):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def is_empty(self):
        return not self.items

    def total(self):
        """Sum of unit price times quantity over every line."""
        return sum(item.unit_price * item.quantity for item in self.items)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, title, unit_price, quantity=1, author=None, cover_image=None):
        """Add a book to the cart (or increase quantity if already present)."""
        existing = next((i for i in self.items if str(i.product_id) == str(product_id)), None)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            item_id = str(existing.id)
        else:
            item = CartItem(
                product_id=product_id,
                title=title,
                author=author,
                unit_price=unit_price,
                cover_image=cover_image,
                quantity=quantity,
                added_at=now,
            )
            self.add_items(item)
            item_id = str(item.id)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=item_id,
                product_id=str(product_id),
                title=title,
                unit_price=unit_price,
                quantity=quantity,
            )
        )

    def update_item_quantity(self, item_id, new_quantity):
        """Update the quantity of an existing cart line."""
        if new_quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, item_id):
        """Remove a line from the cart."""
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
            )
        )

    def clear(self):
        """Remove every line from the cart."""
        lines = list(self.items)
        for item in lines:
            self.remove_items(item)

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                items_removed=len(lines),
                cleared_at=now,
            )
        )
