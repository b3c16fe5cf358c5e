from typing import Optional

from pydantic import BaseModel

from shopscript.pydantic_models.customer.customer_model import Customer


class AuthResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    customer: Customer
    expires_in: Optional[int] = None
    token_type: Optional[str] = None


class TokenRefreshResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
