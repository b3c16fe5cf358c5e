from typing import Any, Dict, List, Optional

from shopscript.core.logging import get_logger
from shopscript.endpoints.cart_api import CartApi
from shopscript.pydantic_models.cart.cart_model import Cart, CartTotals, PaymentMethod, ShippingMethod
from shopscript.services.observable import ObservableService, ServiceState

logger = get_logger(__name__)


class CartState(ServiceState[Cart]):
    """`data` holds the last cart returned by the backend."""


class CartService(ObservableService[CartState]):
    """
    Observable shopping cart.

    Every mutation replaces the whole snapshot with the cart the backend
    returns; totals are never recomputed locally. A failed mutation keeps
    the previous snapshot, records the error and re-raises it.
    """

    def __init__(self, cart_api: CartApi):
        super().__init__(CartState())
        self._cart_api = cart_api

    @property
    def cart(self) -> Optional[Cart]:
        return self._state.data

    @property
    def item_count(self) -> int:
        return self.cart.quantity_count if self.cart else 0

    @property
    def subtotal(self) -> float:
        return self.cart.subtotal if self.cart else 0.0

    @property
    def total(self) -> float:
        return self.cart.total if self.cart else 0.0

    @property
    def is_empty(self) -> bool:
        return self.cart is None or not self.cart.items

    @staticmethod
    def _replace(cart: Cart) -> Dict[str, Any]:
        return {"data": cart}

    async def load_cart(self) -> Cart:
        return await self._run(self._cart_api.get_cart(), on_success=self._replace)

    async def add_to_cart(
        self,
        product_id: int,
        quantity: int = 1,
        variant_id: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Cart:
        return await self._run(
            self._cart_api.add_to_cart(
                product_id=product_id,
                quantity=quantity,
                variant_id=variant_id,
                options=options
            ),
            on_success=self._replace
        )

    async def update_item_quantity(self, item_id: str, quantity: int) -> Cart:
        return await self._run(
            self._cart_api.update_cart_item(item_id=item_id, quantity=quantity),
            on_success=self._replace
        )

    async def remove_item(self, item_id: str) -> Cart:
        return await self._run(self._cart_api.remove_from_cart(item_id), on_success=self._replace)

    async def clear_cart(self) -> None:
        await self._run(self._cart_api.clear_cart(), on_success=lambda _: {"data": None})
        logger.info("Cart cleared")

    async def apply_coupon(self, coupon_code: str) -> Cart:
        return await self._run(self._cart_api.apply_coupon(coupon_code), on_success=self._replace)

    async def remove_coupon(self) -> Cart:
        return await self._run(self._cart_api.remove_coupon(), on_success=self._replace)

    async def get_totals(self) -> CartTotals:
        return await self._run(self._cart_api.get_cart_totals())

    async def get_shipping_methods(self) -> List[ShippingMethod]:
        return await self._run(self._cart_api.get_shipping_methods())

    async def get_payment_methods(self) -> List[PaymentMethod]:
        return await self._run(self._cart_api.get_payment_methods())
