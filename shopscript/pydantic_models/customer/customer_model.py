from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


'''Customer models (Pydantic)'''


class Address(BaseModel):
    id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    street: str
    street2: Optional[str] = None
    city: str
    region: str
    postcode: str
    country: str
    phone: Optional[str] = None
    is_default_shipping: bool = False
    is_default_billing: bool = False


class Customer(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    addresses: List[Address] = Field(default_factory=list)
    default_shipping_address_id: Optional[int] = None
    default_billing_address_id: Optional[int] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    meta: Dict[str, Any] = Field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class CustomerRegistrationRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


class CustomerUpdateRequest(BaseModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
