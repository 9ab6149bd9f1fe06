"""Upload workflow: one session per shop, from catalog resolution to product creation."""

import logging
from typing import Dict, List, Optional

import config
from catalog import SHIPPING_METHODS, CatalogResolver, LookupFailure, ResolvedCatalog, StepResult
from descriptions import DEFAULT_CANVAS_DESCRIPTION
from errors import DraftValidationError, SessionDiscardedError, UploadError
from image_prep import PreparedImage, prepare_image, to_upload_payload
from product import ImagePlacement, ProductDraft, build_product_draft
from relay import PrintifyRelay

logger = logging.getLogger(__name__)

_PENDING_IMAGE_ID = "pending-upload"


class UploadSession:
    """State for one merchandiser creating canvas products in one shop.

    Every ``select_shop`` starts a new generation; a resolution that finishes
    after a newer one started (or after ``discard``) is dropped instead of
    being applied.
    """

    def __init__(
        self,
        relay: PrintifyRelay,
        price_table: Optional[Dict[str, int]] = None,
        blueprint_title: str = config.CANVAS_BLUEPRINT_TITLE,
    ):
        self.relay = relay
        self.price_table = price_table
        self.blueprint_title = blueprint_title
        self._generation = 0

        self.shop_id: Optional[str] = None
        self.catalog: Optional[ResolvedCatalog] = None
        self.catalog_failure: Optional[LookupFailure] = None

        self.image: Optional[PreparedImage] = None
        self.title = ""
        self.description = ""
        self.background = config.DEFAULT_BACKGROUND
        self.placement = ImagePlacement()
        self.shipping_method = config.DEFAULT_SHIPPING_METHOD

    async def select_shop(self, shop_id: str) -> StepResult[ResolvedCatalog]:
        """Resolve the canvas catalog for a shop."""
        self._generation += 1
        generation = self._generation
        self.shop_id = shop_id
        self.catalog = None
        self.catalog_failure = None

        resolver = CatalogResolver(
            self.relay,
            blueprint_title=self.blueprint_title,
            price_table=self.price_table,
        )
        result = await resolver.resolve()

        if generation != self._generation:
            logger.info("Discarding stale catalog resolution for shop %s", shop_id)
            return result

        if result.ok:
            self.catalog = result.value
        else:
            self.catalog_failure = result.failure
        return result

    def discard(self):
        """Drop the session; in-flight resolutions will not be applied."""
        self._generation += 1
        self.catalog = None
        self.reset_form()

    def attach_image(self, image_bytes: bytes, filename: str) -> PreparedImage:
        self.image = prepare_image(image_bytes, filename)
        return self.image

    def set_details(
        self,
        title: str,
        description: Optional[str] = None,
        background: Optional[str] = None,
        placement: Optional[ImagePlacement] = None,
        shipping_method: Optional[str] = None,
    ):
        """Set the text fields. A description of None means the stock canvas copy."""
        self.title = title
        self.description = DEFAULT_CANVAS_DESCRIPTION if description is None else description
        if background:
            self.background = background
        if placement is not None:
            self.placement = placement
        if shipping_method:
            self.shipping_method = shipping_method

    def reset_form(self):
        self.image = None
        self.title = ""
        self.description = ""
        self.background = config.DEFAULT_BACKGROUND
        self.placement = ImagePlacement()

    def build_draft(self, image_id: str) -> ProductDraft:
        catalog = self.catalog
        return build_product_draft(
            title=self.title,
            description=self.description,
            blueprint_id=catalog.blueprint_id if catalog else None,
            print_provider_id=catalog.provider_id if catalog else None,
            variants=catalog.variants if catalog else [],
            image_id=image_id,
            background=self.background,
            placement=self.placement,
            shipping_from=self.shipping_method,
        )

    def validation_errors(self) -> List[str]:
        """Everything blocking submission, before anything is uploaded."""
        errors = []
        if not self.shop_id:
            errors.append("Please select a shop")
        if self.image is None:
            errors.append("Please select an image")
        if self.catalog is None:
            errors.append("Product variants not loaded")
        methods = self.catalog.shipping if self.catalog is not None else SHIPPING_METHODS
        if not self.shipping_method:
            errors.append("Please select a shipping method")
        elif self.shipping_method not in methods:
            errors.append(f"Unknown shipping method: {self.shipping_method}")
        errors.extend(self.build_draft(_PENDING_IMAGE_ID).validate())
        return errors

    async def upload_image(self) -> str:
        """Upload the prepared image; returns Printify's image id."""
        image = self.image
        response = await self.relay.upload_image(to_upload_payload(image))
        if not isinstance(response, dict) or not response.get("id"):
            raise UploadError("Invalid image upload response", {"response": response})
        logger.info("Uploaded %s as image %s", image.filename, response["id"])
        return response["id"]

    async def submit(self) -> dict:
        """Validate, upload the image and create the product.

        Raises DraftValidationError without touching Printify when the session
        is incomplete; Printify errors propagate unchanged. On success the
        form fields are cleared.
        """
        errors = self.validation_errors()
        if errors:
            raise DraftValidationError(errors)

        generation = self._generation
        image_id = await self.upload_image()
        if generation != self._generation:
            logger.warning("Session discarded during upload; image %s left unused", image_id)
            raise SessionDiscardedError(image_id)

        draft = self.build_draft(image_id)
        errors = draft.validate()
        if errors:
            raise DraftValidationError(errors)

        product = await self.relay.create_product(self.shop_id, draft.to_payload())
        logger.info("Created product %s in shop %s", product.get("id") if isinstance(product, dict) else None, self.shop_id)

        if generation == self._generation:
            self.reset_form()
        return product
