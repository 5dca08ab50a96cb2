"""HTTP client for the read-only FakeStore catalog (https://fakestoreapi.com).

``fetch_*`` methods raise ``UpstreamUnavailableError`` on any transport,
status or payload problem. ``get_*`` methods log the failure and return an
empty result instead.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional
from urllib.parse import quote

import httpx
from libs.common.config import get_settings
from libs.common.errors import UpstreamUnavailableError
from libs.common.logging import get_logger, get_request_id
from pydantic import BaseModel, TypeAdapter, ValidationError

logger = get_logger(__name__)


class FakeStoreRating(BaseModel):
    rate: Decimal = Decimal("0")
    count: int = 0


class FakeStoreProduct(BaseModel):
    id: int
    title: str
    price: Decimal
    description: str = ""
    category: str
    image: Optional[str] = None
    rating: Optional[FakeStoreRating] = None


_products_adapter = TypeAdapter(list[FakeStoreProduct])
_categories_adapter = TypeAdapter(list[str])


class FakeStoreClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.FAKESTORE_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.FAKESTORE_TIMEOUT_SECONDS
        self._transport = transport

    async def _get_json(self, path: str) -> Any:
        headers = {"Accept": "application/json"}
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(path, headers=headers)
                response.raise_for_status()
                if not response.content.strip():
                    return None
                return response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailableError(
                f"FakeStore returned {e.response.status_code} for {path}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"FakeStore request failed: {e}") from e
        except ValueError as e:
            raise UpstreamUnavailableError(f"FakeStore sent invalid JSON for {path}") from e

    @staticmethod
    def _parse(adapter: TypeAdapter, payload: Any, path: str):
        try:
            return adapter.validate_python(payload if payload is not None else [])
        except ValidationError as e:
            raise UpstreamUnavailableError(
                f"FakeStore payload for {path} did not match the expected shape"
            ) from e

    # ------------------------------------------------------------------
    # Raising variants (used by the sync engine)
    # ------------------------------------------------------------------

    async def fetch_products(self) -> list[FakeStoreProduct]:
        return self._parse(_products_adapter, await self._get_json("/products"), "/products")

    async def fetch_product(self, product_id: int) -> Optional[FakeStoreProduct]:
        path = f"/products/{product_id}"
        payload = await self._get_json(path)
        if payload is None:
            return None
        try:
            return FakeStoreProduct.model_validate(payload)
        except ValidationError as e:
            raise UpstreamUnavailableError(
                f"FakeStore payload for {path} did not match the expected shape"
            ) from e

    async def fetch_categories(self) -> list[str]:
        path = "/products/categories"
        return self._parse(_categories_adapter, await self._get_json(path), path)

    async def fetch_products_by_category(self, category: str) -> list[FakeStoreProduct]:
        path = f"/products/category/{quote(category)}"
        return self._parse(_products_adapter, await self._get_json(path), path)

    # ------------------------------------------------------------------
    # Degrading variants
    # ------------------------------------------------------------------

    async def get_products(self) -> list[FakeStoreProduct]:
        try:
            return await self.fetch_products()
        except UpstreamUnavailableError as e:
            logger.warning("Could not fetch FakeStore products: %s", e.detail)
            return []

    async def get_product_by_id(self, product_id: int) -> Optional[FakeStoreProduct]:
        try:
            return await self.fetch_product(product_id)
        except UpstreamUnavailableError as e:
            logger.warning("Could not fetch FakeStore product %s: %s", product_id, e.detail)
            return None

    async def get_categories(self) -> list[str]:
        try:
            return await self.fetch_categories()
        except UpstreamUnavailableError as e:
            logger.warning("Could not fetch FakeStore categories: %s", e.detail)
            return []

    async def get_products_by_category(self, category: str) -> list[FakeStoreProduct]:
        try:
            return await self.fetch_products_by_category(category)
        except UpstreamUnavailableError as e:
            logger.warning(
                "Could not fetch FakeStore products for %s: %s", category, e.detail
            )
            return []


def get_fakestore_client() -> FakeStoreClient:
    """FastAPI dependency; tests override it with a mock-transport client."""
    return FakeStoreClient()
