from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


'''Cart models (Pydantic). Totals are always computed by the backend.'''


class CartItem(BaseModel):
    id: str
    product_id: int
    product_name: str
    product_image: Optional[str] = None
    sku: Optional[str] = None
    price: float
    quantity: int
    discount: Optional[float] = None
    total: float
    variant_id: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)
    meta: Dict[str, Any] = Field(default_factory=dict)


class Cart(BaseModel):
    id: Optional[str] = None
    items: List[CartItem] = Field(default_factory=list)
    subtotal: float = 0.0
    discount: Optional[float] = None
    shipping: Optional[float] = None
    tax: Optional[float] = None
    total: float = 0.0
    currency: Optional[str] = None
    coupon_code: Optional[str] = None
    item_count: Optional[int] = None
    meta: Dict[str, Any] = Field(default_factory=dict)

    @property
    def quantity_count(self) -> int:
        """Item count as reported by the backend, else the sum of quantities."""
        if self.item_count is not None:
            return self.item_count
        return sum(item.quantity for item in self.items)


class TotalSegment(BaseModel):
    code: str
    title: str
    value: float


class CartTotals(BaseModel):
    subtotal: float
    discount: float = 0.0
    shipping: float = 0.0
    tax: float = 0.0
    total: float
    currency: Optional[str] = None
    segments: List[TotalSegment] = Field(default_factory=list)


class ShippingMethod(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    currency: Optional[str] = None
    estimated_delivery: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)


class PaymentMethod(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    enabled: bool = True
    config: Dict[str, Any] = Field(default_factory=dict)
