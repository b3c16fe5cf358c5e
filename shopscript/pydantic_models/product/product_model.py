from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ProductVariant(BaseModel):
    id: int
    name: str
    price: float
    sku: Optional[str] = None
    stock_quantity: int = 0
    options: Dict[str, Any] = Field(default_factory=dict)


class Product(BaseModel):
    id: int
    name: str
    summary: Optional[str] = None
    description: Optional[str] = None
    price: float
    compare_price: Optional[float] = None
    currency: Optional[str] = None
    sku: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    main_image: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    stock_quantity: int = 0
    in_stock: bool = True
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    features: Dict[str, Any] = Field(default_factory=dict)
    params: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    url: Optional[str] = None
    featured: bool = False
    variants: List[ProductVariant] = Field(default_factory=list)
    related_product_ids: List[int] = Field(default_factory=list)
    meta: Dict[str, Any] = Field(default_factory=dict)


class ProductListResponse(BaseModel):
    products: List[Product]
    total: int
    page: int
    page_size: int
    total_pages: Optional[int] = None


class ProductCategory(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    count: Optional[int] = None
    url: Optional[str] = None
    subcategories: List["ProductCategory"] = Field(default_factory=list)
    meta: Dict[str, Any] = Field(default_factory=dict)


class ProductReview(BaseModel):
    id: int
    product_id: int
    rating: int
    title: Optional[str] = None
    text: Optional[str] = None
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    created_at: Optional[datetime] = None
    approved: bool = True


class ProductFilterParams(BaseModel):
    """Catalog filters, serialized to the backend's query parameter names."""

    search_query: Optional[str] = None
    category_id: Optional[int] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    tags: Optional[List[str]] = None
    in_stock: Optional[bool] = None
    featured: Optional[bool] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None

    def to_query(self) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if self.search_query is not None:
            query["query"] = self.search_query
        if self.category_id is not None:
            query["category_id"] = self.category_id
        if self.min_price is not None:
            query["price_min"] = self.min_price
        if self.max_price is not None:
            query["price_max"] = self.max_price
        if self.tags:
            query["tags"] = ",".join(self.tags)
        if self.in_stock is not None:
            query["in_stock"] = 1 if self.in_stock else 0
        if self.featured is not None:
            query["featured"] = 1 if self.featured else 0
        if self.sort_by is not None:
            query["sort"] = self.sort_by
        if self.sort_order is not None:
            query["order"] = self.sort_order
        return query
