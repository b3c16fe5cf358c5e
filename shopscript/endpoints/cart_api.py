from typing import Any, Dict, List, Optional

from shopscript.endpoints.base_api import BaseApi
from shopscript.pydantic_models.cart.cart_model import Cart, CartTotals, PaymentMethod, ShippingMethod


class CartApi(BaseApi):
    """Shopping cart endpoints. Mutations return the server's updated cart."""

    async def get_cart(self) -> Cart:
        response = await self._pipeline.get("/api/cart")
        return self._parse(response, Cart)

    async def add_to_cart(
        self,
        product_id: int,
        quantity: int = 1,
        variant_id: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Cart:
        body: Dict[str, Any] = {"product_id": product_id, "quantity": quantity}
        if variant_id is not None:
            body["variant_id"] = variant_id
        if options is not None:
            body["options"] = options

        response = await self._pipeline.post("/api/cart/items", body=body)
        return self._parse(response, Cart)

    async def update_cart_item(self, item_id: str, quantity: int) -> Cart:
        response = await self._pipeline.put(f"/api/cart/items/{item_id}", body={"quantity": quantity})
        return self._parse(response, Cart)

    async def remove_from_cart(self, item_id: str) -> Cart:
        response = await self._pipeline.delete(f"/api/cart/items/{item_id}")
        if self._has_body(response):
            return self._parse(response, Cart)
        # No cart in the response, fetch the authoritative one
        return await self.get_cart()

    async def clear_cart(self) -> None:
        await self._pipeline.delete("/api/cart")

    async def apply_coupon(self, coupon_code: str) -> Cart:
        response = await self._pipeline.post("/api/cart/coupon", body={"coupon_code": coupon_code})
        return self._parse(response, Cart)

    async def remove_coupon(self) -> Cart:
        response = await self._pipeline.delete("/api/cart/coupon")
        if self._has_body(response):
            return self._parse(response, Cart)
        return await self.get_cart()

    async def get_cart_totals(self) -> CartTotals:
        response = await self._pipeline.get("/api/cart/totals")
        return self._parse(response, CartTotals)

    async def get_shipping_methods(self) -> List[ShippingMethod]:
        response = await self._pipeline.get("/api/cart/shipping-methods")
        return self._parse_list(response, ShippingMethod, "shipping_methods")

    async def get_payment_methods(self) -> List[PaymentMethod]:
        response = await self._pipeline.get("/api/cart/payment-methods")
        return self._parse_list(response, PaymentMethod, "payment_methods")
