from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from shopscript.pydantic_models.customer.customer_model import Address


class OrderStatus(str, Enum):
    NEW = "new"
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class OrderItem(BaseModel):
    id: int
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


class Order(BaseModel):
    id: int
    order_number: str
    status: OrderStatus
    items: List[OrderItem]
    subtotal: float
    discount: Optional[float] = None
    shipping: float
    tax: float
    total: float
    currency: Optional[str] = None
    shipping_address: Address
    billing_address: Address
    shipping_method: Optional[str] = None
    payment_method: Optional[str] = None
    coupon_code: Optional[str] = None
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    tracking_number: Optional[str] = None
    tracking_url: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)


class OrderListResponse(BaseModel):
    orders: List[Order]
    total: int
    page: int
    page_size: int


class CheckoutRequest(BaseModel):
    shipping_address: Address
    billing_address: Address
    shipping_method_id: str
    payment_method_id: str
    comment: Optional[str] = None
    coupon_code: Optional[str] = None
    payment_data: Dict[str, Any] = Field(default_factory=dict)


class CheckoutResponse(BaseModel):
    order: Order
    payment_url: Optional[str] = None
    payment_token: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)
