import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse

from deps import get_relay
from descriptions import description_or_default
from image_prep import sample_color
from listing import fetch_all_products, filter_products, summarize_products
from relay import PrintifyRelay
from session import UploadSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["workflow"])


def _failure_response(failure) -> JSONResponse:
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


@router.get("/workflow/canvas")
async def resolve_canvas(
    shop_id: str = Query(...),
    relay: PrintifyRelay = Depends(get_relay),
):
    """Canvas blueprint, provider, priced size variants and shipping for a shop."""
    session = UploadSession(relay)
    result = await session.select_shop(shop_id)
    if not result.ok:
        return _failure_response(result.failure)
    return result.value.to_dict()


@router.post("/workflow/products")
async def create_canvas_product(
    shop_id: str = Form(...),
    title: str = Form(...),
    description: Optional[str] = Form(None),
    background: Optional[str] = Form(None),
    shipping_method: Optional[str] = Form(None),
    image: UploadFile = File(...),
    relay: PrintifyRelay = Depends(get_relay),
):
    """Prepare the image, resolve the catalog and create the canvas product in one go."""
    session = UploadSession(relay)

    contents = await image.read()
    prepared = session.attach_image(contents, image.filename or "image.jpg")
    logger.info("Workflow upload for shop %s: %s (%dx%d)", shop_id, prepared.filename, prepared.width, prepared.height)

    result = await session.select_shop(shop_id)
    if not result.ok:
        return _failure_response(result.failure)

    session.set_details(
        title=title,
        description=description_or_default(description),
        background=background,
        shipping_method=shipping_method,
    )
    return await session.submit()


@router.post("/workflow/color")
async def pick_color(
    x: int = Form(...),
    y: int = Form(...),
    image: UploadFile = File(...),
):
    """Hex colour of one pixel, for choosing the canvas background."""
    contents = await image.read()
    return {"color": sample_color(contents, x, y)}


@router.get("/shops/{shop_id}/products/all")
async def list_all_products(
    shop_id: str,
    search: str = Query(default=""),
    provider: str = Query(default="all", pattern=r"^(all|\d+)$"),
    status: str = Query(default="all", pattern="^(all|published|hidden)$"),
    relay: PrintifyRelay = Depends(get_relay),
):
    """Every canvas product in the shop, filtered for display."""
    products = await fetch_all_products(relay, shop_id)
    return {
        "data": filter_products(products, search=search, provider=provider, status=status),
        "summary": summarize_products(products),
    }
