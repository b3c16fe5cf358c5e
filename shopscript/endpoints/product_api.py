from typing import Any, Dict, List, Optional

from shopscript.core.errors import ErrorKind, ShopScriptError
from shopscript.endpoints.base_api import BaseApi
from shopscript.pydantic_models.product.product_model import (
    Product,
    ProductCategory,
    ProductFilterParams,
    ProductListResponse,
    ProductReview
)


class ProductApi(BaseApi):
    """Catalog endpoints: listing, search, categories and reviews."""

    @staticmethod
    def _page_query(page: int, page_size: int, filters: Optional[ProductFilterParams] = None) -> Dict[str, Any]:
        query: Dict[str, Any] = {"page": page, "limit": page_size}
        if filters is not None:
            query.update(filters.to_query())
        return query

    async def get_products(
        self,
        page: int = 1,
        page_size: int = 20,
        filters: Optional[ProductFilterParams] = None
    ) -> ProductListResponse:
        response = await self._pipeline.get("/api/products", query=self._page_query(page, page_size, filters))
        return self._parse(response, ProductListResponse)

    async def get_product(self, product_id: int) -> Product:
        try:
            response = await self._pipeline.get(f"/api/products/{product_id}")
        except ShopScriptError as e:
            if e.kind is ErrorKind.NOT_FOUND:
                raise ShopScriptError(
                    e.record.specialize("product_not_found", f"Product with ID {product_id} not found")
                ) from e
            raise
        return self._parse(response, Product)

    async def search_products(
        self,
        query: str,
        page: int = 1,
        page_size: int = 20,
        filters: Optional[ProductFilterParams] = None
    ) -> ProductListResponse:
        params = self._page_query(page, page_size, filters)
        params["query"] = query
        response = await self._pipeline.get("/api/products/search", query=params)
        return self._parse(response, ProductListResponse)

    async def get_products_by_category(
        self,
        category_id: int,
        page: int = 1,
        page_size: int = 20,
        filters: Optional[ProductFilterParams] = None
    ) -> ProductListResponse:
        response = await self._pipeline.get(
            f"/api/categories/{category_id}/products",
            query=self._page_query(page, page_size, filters)
        )
        return self._parse(response, ProductListResponse)

    async def get_categories(self) -> List[ProductCategory]:
        response = await self._pipeline.get("/api/categories")
        return self._parse_list(response, ProductCategory, "categories")

    async def get_category(self, category_id: int) -> ProductCategory:
        try:
            response = await self._pipeline.get(f"/api/categories/{category_id}")
        except ShopScriptError as e:
            if e.kind is ErrorKind.NOT_FOUND:
                raise ShopScriptError(e.record.specialize("category_not_found", "Category not found")) from e
            raise
        return self._parse(response, ProductCategory)

    async def get_product_reviews(self, product_id: int, page: int = 1, page_size: int = 20) -> List[ProductReview]:
        response = await self._pipeline.get(
            f"/api/products/{product_id}/reviews",
            query={"page": page, "limit": page_size}
        )
        return self._parse_list(response, ProductReview, "reviews")

    async def add_product_review(
        self,
        product_id: int,
        rating: int,
        title: Optional[str] = None,
        text: Optional[str] = None
    ) -> ProductReview:
        body: Dict[str, Any] = {"rating": rating}
        if title is not None:
            body["title"] = title
        if text is not None:
            body["text"] = text
        response = await self._pipeline.post(f"/api/products/{product_id}/reviews", body=body)
        return self._parse(response, ProductReview)

    async def get_related_products(self, product_id: int) -> List[Product]:
        response = await self._pipeline.get(f"/api/products/{product_id}/related")
        return self._parse_list(response, Product, "products")

    async def get_featured_products(self, page: int = 1, page_size: int = 20) -> List[Product]:
        response = await self._pipeline.get("/api/products/featured", query={"page": page, "limit": page_size})
        return self._parse_list(response, Product, "products")
