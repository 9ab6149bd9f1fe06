"""Printify API client: attaches the bearer token and forwards single-attempt requests"""

import logging
from typing import Any, Optional

import httpx

import config
from errors import PrintifyError, PrintifyTransportError

logger = logging.getLogger(__name__)


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class PrintifyAPI:
    """Printify API client.

    Every call is one request with no retries. A non-2xx answer raises
    PrintifyError carrying the upstream status and body; a request that never
    got an answer raises PrintifyTransportError.
    """

    def __init__(
        self,
        api_token: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        upload_timeout: Optional[float] = None,
    ):
        self.api_token = api_token if api_token is not None else config.PRINTIFY_API_TOKEN
        self.base_url = (base_url or config.PRINTIFY_BASE_URL).rstrip("/")
        self.upload_timeout = upload_timeout or config.PRINTIFY_UPLOAD_TIMEOUT
        self.transport = transport
        self.headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }

    @property
    def is_configured(self) -> bool:
        return bool(self.api_token)

    def _client(self, **kwargs) -> httpx.AsyncClient:
        if self.transport is not None:
            kwargs["transport"] = self.transport
        return httpx.AsyncClient(**kwargs)

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        client_kwargs = {"timeout": timeout} if timeout else {}
        logger.info("Printify %s: %s %s", operation, method, path)
        try:
            async with self._client(**client_kwargs) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self.headers,
                    json=json,
                    params=params,
                )
        except httpx.HTTPError as e:
            logger.error("Printify %s unreachable: %s", operation, e)
            raise PrintifyTransportError(operation, e) from e

        if response.status_code >= 400:
            body = _response_body(response)
            logger.warning(
                "Printify %s failed (%d): %s",
                operation, response.status_code, response.text[:500],
            )
            raise PrintifyError(response.status_code, body, operation)
        return _response_body(response)

    async def get_shops(self) -> Any:
        """Get list of shops."""
        return await self._request("list shops", "GET", "/shops.json")

    async def upload_image(self, payload: dict) -> dict:
        """Upload an image; payload is {file_name, contents} (base64) or {file_name, url}."""
        return await self._request(
            "upload image", "POST", "/uploads/images.json",
            json=payload, timeout=self.upload_timeout,
        )

    async def create_product(self, shop_id: str, payload: dict) -> dict:
        """Create a new product in a shop."""
        return await self._request(
            "create product", "POST", f"/shops/{shop_id}/products.json", json=payload,
        )

    async def list_products(self, shop_id: str, page: int = 1, limit: int = 20) -> dict:
        """List products in shop (paginated)."""
        return await self._request(
            "list products", "GET", f"/shops/{shop_id}/products.json",
            params={"page": page, "limit": limit},
        )

    async def get_blueprints(self) -> Any:
        """Get the full catalog of blueprints."""
        return await self._request("list blueprints", "GET", "/catalog/blueprints.json")

    async def get_blueprint(self, blueprint_id: str) -> dict:
        return await self._request(
            "get blueprint", "GET", f"/catalog/blueprints/{blueprint_id}.json",
        )

    async def get_blueprint_providers(self, blueprint_id: str) -> Any:
        """Get print providers offering a blueprint."""
        return await self._request(
            "list blueprint providers", "GET",
            f"/catalog/blueprints/{blueprint_id}/print_providers.json",
        )

    async def get_blueprint_variants(self, blueprint_id: str, print_provider_id: str) -> Any:
        """Get available variants for a blueprint + provider."""
        return await self._request(
            "list variants", "GET",
            f"/catalog/blueprints/{blueprint_id}/print_providers/{print_provider_id}/variants.json",
        )

    async def get_shipping(self, blueprint_id: str, print_provider_id: str) -> Any:
        """Get shipping rates for a blueprint + provider."""
        return await self._request(
            "get shipping", "GET",
            f"/catalog/blueprints/{blueprint_id}/print_providers/{print_provider_id}/shipping.json",
        )

    async def get_print_providers(self) -> Any:
        """Get every print provider Printify knows about."""
        return await self._request("list print providers", "GET", "/catalog/print_providers.json")
