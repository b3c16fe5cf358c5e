from typing import Any, Dict, Optional

from shopscript.core.errors import ErrorKind, ErrorRecord, ShopScriptError
from shopscript.endpoints.base_api import BaseApi
from shopscript.pydantic_models.order.order_model import Order, OrderListResponse


class OrderApi(BaseApi):
    """Order history endpoints."""

    async def get_orders(self, page: int = 1, page_size: int = 20) -> OrderListResponse:
        response = await self._pipeline.get("/api/orders", query={"page": page, "limit": page_size})
        return self._parse(response, OrderListResponse)

    async def get_order(self, order_id: int) -> Order:
        return await self._get_order(f"/api/orders/{order_id}", str(order_id))

    async def get_order_by_number(self, order_number: str) -> Order:
        return await self._get_order(f"/api/orders/number/{order_number}", order_number)

    async def _get_order(self, path: str, reference: str) -> Order:
        try:
            response = await self._pipeline.get(path)
        except ShopScriptError as e:
            if e.kind is ErrorKind.NOT_FOUND:
                raise ShopScriptError(
                    e.record.specialize("order_not_found", f"Order with ID {reference} not found")
                ) from e
            raise
        return self._parse(response, Order)

    async def cancel_order(self, order_id: int, reason: Optional[str] = None) -> Order:
        body = {"reason": reason} if reason is not None else {}
        response = await self._pipeline.post(f"/api/orders/{order_id}/cancel", body=body)
        return self._parse(response, Order)

    async def reorder(self, order_id: int) -> int:
        """Create a new cart from a past order. Returns the new order id."""
        response = await self._pipeline.post(f"/api/orders/{order_id}/reorder")
        data = self._json(response)
        new_id = None
        if isinstance(data, dict):
            new_id = data.get("order_id", data.get("id"))
        if not isinstance(new_id, int):
            raise ShopScriptError(
                ErrorRecord(
                    kind=ErrorKind.UNKNOWN,
                    message="Invalid response from server: missing order id",
                    http_status=response.status_code,
                    code="invalid_response",
                )
            )
        return new_id

    async def track_order(self, order_id: int) -> Dict[str, Any]:
        response = await self._pipeline.get(f"/api/orders/{order_id}/tracking")
        data = self._json(response)
        return data if isinstance(data, dict) else {}
