"""Shop product listing: fetch every page, keep canvas providers, filter for display."""

import logging
import math
from typing import Dict, Iterable, List, Optional, Union

import config
from relay import PrintifyRelay

logger = logging.getLogger(__name__)


def is_listed_provider(product: dict, provider_ids: Iterable[int] = config.LISTING_PROVIDERS) -> bool:
    return product.get("print_provider_id") in set(provider_ids)


async def fetch_all_products(
    relay: PrintifyRelay,
    shop_id: str,
    limit: int = config.PRODUCTS_PAGE_LIMIT,
) -> List[dict]:
    """Every product in the shop made by a listed provider.

    Page 1 tells us the total; the remaining pages are fetched one after the
    other. Any failure propagates.
    """
    first = await relay.list_products(shop_id, page=1, limit=limit)
    total = first.get("total", 0) or 0
    products = [p for p in first.get("data", []) if is_listed_provider(p)]

    total_pages = math.ceil(total / limit) if limit else 1
    for page in range(2, total_pages + 1):
        result = await relay.list_products(shop_id, page=page, limit=limit)
        products.extend(p for p in result.get("data", []) if is_listed_provider(p))
        logger.debug("Loaded products page %d/%d for shop %s", page, total_pages, shop_id)

    logger.info("Loaded %d listed products (of %d) for shop %s", len(products), total, shop_id)
    return products


def filter_products(
    products: List[dict],
    search: str = "",
    provider: Union[str, int, None] = "all",
    status: str = "all",
) -> List[dict]:
    """Title search (case-insensitive), provider id filter and published/hidden filter."""
    query = (search or "").lower()
    provider_id: Optional[int] = None
    if provider not in (None, "", "all"):
        provider_id = int(provider)

    result = []
    for p in products:
        if query and query not in (p.get("title") or "").lower():
            continue
        if provider_id is not None and p.get("print_provider_id") != provider_id:
            continue
        if status == "published" and not p.get("visible"):
            continue
        if status == "hidden" and p.get("visible"):
            continue
        result.append(p)
    return result


def summarize_products(products: List[dict]) -> Dict[str, int]:
    summary = {"total": len(products)}
    for provider_id, name in config.LISTING_PROVIDERS.items():
        summary[name.lower()] = sum(1 for p in products if p.get("print_provider_id") == provider_id)
    return summary
