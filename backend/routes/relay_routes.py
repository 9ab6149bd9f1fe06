from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel

import config
from deps import get_relay
from relay import PrintifyRelay

router = APIRouter(prefix="/api", tags=["relay"])


@router.get("/shops")
async def list_shops(relay: PrintifyRelay = Depends(get_relay)):
    """List shops on the Printify account."""
    return await relay.list_shops()


class ImageUploadRequest(BaseModel):
    file_name: str
    contents: Optional[str] = None  # base64, no data: prefix
    url: Optional[str] = None


@router.post("/uploads/images")
async def upload_image(
    request: ImageUploadRequest,
    relay: PrintifyRelay = Depends(get_relay),
):
    """Upload a base64-encoded image; returns Printify's image record."""
    return await relay.upload_image(request.model_dump(exclude_none=True))


@router.post("/shops/{shop_id}/products")
async def create_product(
    shop_id: str,
    payload: Dict[str, Any] = Body(...),
    relay: PrintifyRelay = Depends(get_relay),
):
    return await relay.create_product(shop_id, payload)


@router.get("/shops/{shop_id}/products")
async def list_products(
    shop_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=config.PRODUCTS_PAGE_LIMIT, ge=1, le=config.PRODUCTS_PAGE_LIMIT),
    relay: PrintifyRelay = Depends(get_relay),
):
    """One page of the shop's products, as Printify returns it."""
    return await relay.list_products(shop_id, page=page, limit=limit)


@router.get("/catalog")
async def list_blueprints(relay: PrintifyRelay = Depends(get_relay)):
    return await relay.list_blueprints()


@router.get("/catalog/{blueprint_id}")
async def get_blueprint(blueprint_id: str, relay: PrintifyRelay = Depends(get_relay)):
    return await relay.get_blueprint(blueprint_id)


@router.get("/catalog/{blueprint_id}/print_providers")
async def list_blueprint_providers(blueprint_id: str, relay: PrintifyRelay = Depends(get_relay)):
    """The canvas provider for a blueprint, or 404 listing what was available."""
    return await relay.list_blueprint_providers(blueprint_id)


@router.get("/catalog/{blueprint_id}/print_providers/{provider_id}/variants")
async def list_variants(blueprint_id: str, provider_id: str, relay: PrintifyRelay = Depends(get_relay)):
    return await relay.list_variants(blueprint_id, provider_id)


@router.get("/catalog/{blueprint_id}/print_providers/{provider_id}/shipping")
async def get_shipping(blueprint_id: str, provider_id: str, relay: PrintifyRelay = Depends(get_relay)):
    return await relay.get_shipping(blueprint_id, provider_id)


@router.get("/print-providers")
async def list_print_providers(relay: PrintifyRelay = Depends(get_relay)):
    return await relay.list_print_providers()
