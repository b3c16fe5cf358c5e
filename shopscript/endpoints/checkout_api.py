from typing import Any, Dict, Optional

from shopscript.endpoints.base_api import BaseApi
from shopscript.pydantic_models.order.order_model import CheckoutRequest, CheckoutResponse, Order


class CheckoutApi(BaseApi):
    """Checkout and payment endpoints."""

    async def place_order(self, request: CheckoutRequest) -> CheckoutResponse:
        response = await self._pipeline.post("/api/checkout", body=request.model_dump(mode="json", exclude_none=True))
        return self._parse(response, CheckoutResponse)

    async def validate_checkout(self, request: CheckoutRequest) -> Dict[str, Any]:
        """Validate addresses and payment data before placing the order."""
        response = await self._pipeline.post(
            "/api/checkout/validate",
            body=request.model_dump(mode="json", exclude_none=True)
        )
        data = self._json(response)
        return data if isinstance(data, dict) else {}

    async def process_payment(
        self,
        order_id: int,
        payment_method_id: str,
        payment_data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"order_id": order_id, "payment_method_id": payment_method_id}
        if payment_data is not None:
            body["payment_data"] = payment_data
        response = await self._pipeline.post("/api/checkout/payment", body=body)
        data = self._json(response)
        return data if isinstance(data, dict) else {}

    async def confirm_payment(self, order_id: int, payment_token: str) -> Order:
        """Confirm a payment after the external gateway has processed it."""
        response = await self._pipeline.post(
            "/api/checkout/payment/confirm",
            body={"order_id": order_id, "payment_token": payment_token}
        )
        return self._parse(response, Order)
