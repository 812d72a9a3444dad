"""Cart service layer (Use Cases).

Manages the mutable cart of a user or a guest.  Lines carry no price:
every read prices them live through ``PricingService``, so the cart
always reflects the current catalogue.

Business rules enforced:
- A line can only be added for a product variant that has a price.
- Repeat adds of the same (product, variant) accumulate quantity.
- Only the owner may change or remove a line (404 if missing, 403 if
  owned by someone else, checked under a row lock).
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import structlog
from django.db import transaction

from modules.carts.dtos import CartLineDTO, CartProductDTO, CartViewDTO
from modules.carts.exceptions import CartItemForbidden, CartItemNotFound
from modules.core.access import AccessMode, can_access, owner_fields, owner_filter
from modules.products.services import PricingService

if TYPE_CHECKING:
    from modules.carts.dtos import AddCartItemDTO, UpdateCartItemDTO
    from modules.carts.models import CartItem
    from modules.carts.repositories.interfaces import ICartRepository
    from modules.core.access import Actor
    from modules.core.activity import ActivityLogService
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class CartService:
    """Application service for cart use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
        pricing_service: Optional[PricingService] = None,
        activity_log: Optional[ActivityLogService] = None,
    ) -> None:
        self._cart_repo = cart_repository
        self._product_repo = product_repository
        self._pricing = pricing_service or PricingService(product_repository)
        self._activity = activity_log

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_item(self, actor: Actor, dto: AddCartItemDTO) -> CartViewDTO:
        """Add *dto.quantity* units of a product variant to the cart.

        Raises:
            ProductNotFound: the product does not exist.
            VariantUnavailable: the variant has no price.
            CartQuantityExceeded: the line would go over the quantity cap.
        """
        log = logger.bind(
            actor=str(actor), product_id=str(dto.product_id), variant=dto.variant
        )
        self._pricing.resolve_unit_price(dto.product_id, dto.variant)

        line = self._cart_repo.add_quantity(
            owner_fields(actor), dto.product_id, dto.variant, dto.quantity
        )
        log.info("cart.item_added", item_id=str(line.id), quantity=line.quantity)
        self._record(
            "cart.item_added",
            actor,
            product_id=dto.product_id,
            variant=dto.variant.value,
            quantity=dto.quantity,
        )
        return self.get_cart(actor)

    @transaction.atomic
    def update_quantity(
        self, actor: Actor, item_id: str, dto: UpdateCartItemDTO
    ) -> CartViewDTO:
        """Replace the quantity of one of the actor's lines.

        Raises:
            CartItemNotFound: the line does not exist.
            CartItemForbidden: the line belongs to another owner.
        """
        line = self._get_owned_line(actor, item_id)
        line.quantity = dto.quantity
        self._cart_repo.save(line)

        logger.info(
            "cart.item_updated", item_id=str(line.id), quantity=dto.quantity
        )
        self._record("cart.item_updated", actor, item_id=line.id, quantity=dto.quantity)
        return self.get_cart(actor)

    @transaction.atomic
    def remove_item(self, actor: Actor, item_id: str) -> CartViewDTO:
        """Remove one of the actor's lines.

        Raises:
            CartItemNotFound: the line does not exist.
            CartItemForbidden: the line belongs to another owner.
        """
        line = self._get_owned_line(actor, item_id)
        self._cart_repo.delete(str(line.id))

        logger.info("cart.item_removed", item_id=str(line.id))
        self._record("cart.item_removed", actor, item_id=line.id)
        return self.get_cart(actor)

    @transaction.atomic
    def clear(self, actor: Actor) -> CartViewDTO:
        removed = self._cart_repo.delete_for_owner(owner_filter(actor))
        logger.info("cart.cleared", actor=str(actor), removed=removed)
        return self.get_cart(actor)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_cart(self, actor: Actor) -> CartViewDTO:
        """Return the actor's cart priced at current catalogue prices.

        Products are loaded with one batched query.  Lines whose variant
        lost its price are reported unavailable and left out of the total.
        """
        lines = self._cart_repo.list_for_owner(owner_filter(actor))
        products = self._product_repo.get_many(line.product_id for line in lines)

        items = []
        total_price = Decimal("0.00")
        total_items = 0
        for line in lines:
            product = products.get(line.product_id)
            if product is None:
                continue
            item = self._price_line(line, product)
            if item.subtotal is not None:
                total_price += item.subtotal
            total_items += item.quantity
            items.append(item)

        return CartViewDTO(
            items=items, total_price=total_price, total_items=total_items
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_owned_line(self, actor: Actor, item_id: str) -> CartItem:
        line = self._cart_repo.get_for_update(item_id)
        if line is None:
            raise CartItemNotFound(f"Cart item {item_id} not found.")
        if not can_access(actor, line, AccessMode.WRITE):
            logger.warning("cart.access_denied", item_id=str(item_id), actor=str(actor))
            raise CartItemForbidden()
        return line

    def _price_line(self, line: CartItem, product: Product) -> CartLineDTO:
        unit_price = self._pricing.price_for(product, line.variant)
        subtotal = unit_price * line.quantity if unit_price is not None else None
        return CartLineDTO(
            id=line.id,
            product=CartProductDTO(
                id=product.id,
                name=product.name,
                image_url=product.primary_image_url,
                variety=product.variety,
                berry_shape=product.berry_shape,
                color=product.color,
                taste=product.taste,
            ),
            variant=line.variant,
            quantity=line.quantity,
            unit_price=unit_price,
            subtotal=subtotal,
            available=unit_price is not None,
        )

    def _record(self, action: str, actor: Actor, **data) -> None:
        if self._activity:
            self._activity.record(action, actor, **data)
