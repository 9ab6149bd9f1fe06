"""Relay operations: Printify calls reshaped into the envelopes the HTTP surface returns.

Successful list responses are wrapped as {"data": ...}. Upstream errors are
left as PrintifyError / PrintifyTransportError so callers can pass the status
and body through unchanged.
"""

import logging
from typing import Any, Dict, List, Optional

import config
from errors import RelayError
from printify import PrintifyAPI

logger = logging.getLogger(__name__)


def _unwrap_list(payload: Any) -> List[dict]:
    """Printify list endpoints answer either a bare list or {"data": [...]}."""
    if isinstance(payload, dict):
        payload = payload.get("data")
    return payload if isinstance(payload, list) else []


def find_canvas_provider(providers: List[dict]) -> Optional[dict]:
    """The provider accepted for the canvas blueprint, by title/name or legacy id."""
    name = config.CANVAS_PROVIDER_NAME
    for p in providers:
        title = str(p.get("title") or "").lower()
        alt_name = str(p.get("name") or "").lower()
        if name in title or name in alt_name or str(p.get("id")) == config.CANVAS_PROVIDER_FALLBACK_ID:
            return p
    return None


def extract_variants(payload: Any) -> Dict[str, dict]:
    """Variant mapping from any of the shapes the variants endpoint returns.

    Keys are opaque. A list of variants is keyed by position.
    """
    variants: Any = {}
    if isinstance(payload, dict):
        if "variants" in payload:
            variants = payload["variants"]
        elif isinstance(payload.get("data"), dict) and "variants" in payload["data"]:
            variants = payload["data"]["variants"]
        else:
            variants = payload
    if isinstance(variants, list):
        variants = {str(i): v for i, v in enumerate(variants)}
    return variants if isinstance(variants, dict) else {}


def valid_variants(variants: Dict[str, Any]) -> Dict[str, dict]:
    """Drop entries lacking a title or an id."""
    valid = {}
    for key, variant in variants.items():
        if isinstance(variant, dict) and variant.get("title") and variant.get("id"):
            valid[key] = variant
        else:
            logger.debug("Skipping invalid variant %s: %r", key, variant)
    return valid


class PrintifyRelay:
    """The relay's operations, one per HTTP route."""

    def __init__(self, printify: PrintifyAPI):
        self.printify = printify

    async def list_shops(self) -> dict:
        shops = await self.printify.get_shops()
        return {"data": shops if isinstance(shops, list) else []}

    async def upload_image(self, payload: dict) -> Any:
        return await self.printify.upload_image(payload)

    async def create_product(self, shop_id: str, payload: dict) -> Any:
        return await self.printify.create_product(shop_id, payload)

    async def list_products(self, shop_id: str, page: int = 1, limit: int = config.PRODUCTS_PAGE_LIMIT) -> Any:
        return await self.printify.list_products(shop_id, page=page, limit=limit)

    async def list_blueprints(self) -> dict:
        blueprints = _unwrap_list(await self.printify.get_blueprints())
        logger.info("Found %d blueprints", len(blueprints))
        return {"data": blueprints}

    async def get_blueprint(self, blueprint_id: str) -> Any:
        return await self.printify.get_blueprint(blueprint_id)

    async def list_blueprint_providers(self, blueprint_id: str) -> dict:
        """Providers for a blueprint, narrowed to the one canvas provider."""
        providers = _unwrap_list(await self.printify.get_blueprint_providers(blueprint_id))
        provider = find_canvas_provider(providers)
        if provider is None:
            available = [p.get("title") for p in providers]
            logger.warning("No canvas provider for blueprint %s; available: %s", blueprint_id, available)
            raise RelayError(404, {
                "message": f"{config.CANVAS_PROVIDER_NAME.title()} provider not found",
                "available_providers": available,
            })
        logger.info("Canvas provider for blueprint %s: %s (%s)", blueprint_id, provider.get("title"), provider.get("id"))
        return {"data": [provider]}

    async def list_variants(self, blueprint_id: str, provider_id: str) -> dict:
        """Variant mapping for a provider, keeping structurally valid entries only."""
        variants = extract_variants(
            await self.printify.get_blueprint_variants(blueprint_id, provider_id)
        )
        valid = valid_variants(variants)
        logger.info("Variants for %s/%s: %d of %d valid", blueprint_id, provider_id, len(valid), len(variants))
        if not valid:
            raise RelayError(404, {
                "message": "No valid variants found",
                "error": "The API response did not contain any valid variants",
            })
        return {"data": valid}

    async def get_shipping(self, blueprint_id: str, provider_id: str) -> Any:
        return await self.printify.get_shipping(blueprint_id, provider_id)

    async def list_print_providers(self) -> dict:
        """Global provider list, narrowed to the providers the shop sells through."""
        accepted = {name.lower() for name in config.LISTING_PROVIDERS.values()}
        providers = _unwrap_list(await self.printify.get_print_providers())
        return {"data": [p for p in providers if str(p.get("title") or "").lower() in accepted]}
