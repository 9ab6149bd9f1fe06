"""Product drafts: the payload Printify's product-creation endpoint expects."""

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, List, Optional

import config

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass
class ImagePlacement:
    """Where an image sits in a placeholder. Defaults: centered, unscaled, unrotated."""
    x: float = 0.5
    y: float = 0.5
    scale: float = 1
    angle: float = 0


@dataclass
class PlacedImage:
    id: str
    placement: ImagePlacement = field(default_factory=ImagePlacement)

    def to_dict(self) -> dict:
        return {"id": self.id, **asdict(self.placement)}


@dataclass
class Placeholder:
    position: str
    images: List[PlacedImage] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"position": self.position, "images": [i.to_dict() for i in self.images]}


@dataclass
class PrintArea:
    position: str
    variant_ids: List[int]
    placeholders: Any       # list of Placeholder; anything else fails validation
    background: Optional[str] = None

    def to_dict(self) -> dict:
        area = {
            "position": self.position,
            "variant_ids": list(self.variant_ids),
            "placeholders": [p.to_dict() for p in self.placeholders],
        }
        if self.background is not None:
            area["background"] = self.background
        return area


@dataclass
class DraftVariant:
    id: int
    price: Any              # cents
    is_enabled: bool = True

    def to_dict(self) -> dict:
        return {"id": self.id, "price": self.price, "is_enabled": self.is_enabled}


@dataclass
class ProductDraft:
    title: str
    description: str
    blueprint_id: Any
    print_provider_id: Any
    variants: List[DraftVariant]
    print_areas: List[PrintArea]
    shipping_from: Optional[str] = config.DEFAULT_SHIPPING_METHOD
    print_details: dict = field(default_factory=lambda: {"format": "jpg", "print_on_side": "regular"})

    def validate(self) -> List[str]:
        """Every problem with the draft, as user-facing messages. Empty means submittable."""
        errors = []

        if not (self.title or "").strip():
            errors.append("Title is required")
        if not (self.description or "").strip():
            errors.append("Description is required")
        if not self.blueprint_id:
            errors.append("Blueprint ID is required")
        if not self.print_provider_id:
            errors.append("Print provider ID is required")

        if not self.variants:
            errors.append("At least one variant is required")
        else:
            for i, variant in enumerate(self.variants, start=1):
                if not variant.id:
                    errors.append(f"Variant {i}: ID is required")
                if isinstance(variant.price, bool) or not isinstance(variant.price, (int, float)):
                    errors.append(f"Variant {i}: Price must be a number")

        if not self.print_areas:
            errors.append("At least one print area is required")
        else:
            for i, area in enumerate(self.print_areas, start=1):
                if not area.position:
                    errors.append(f"Print area {i}: Position is required")
                if not area.variant_ids:
                    errors.append(f"Print area {i}: At least one variant ID is required")
                if not isinstance(area.placeholders, list):
                    errors.append(f"Print area {i}: Placeholders must be a list")
                if area.background is not None and not _HEX_COLOR_RE.match(area.background):
                    errors.append(f"Print area {i}: Background must be a hex colour")

        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validate()

    def to_payload(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "blueprint_id": self.blueprint_id,
            "print_provider_id": self.print_provider_id,
            "variants": [v.to_dict() for v in self.variants],
            "print_areas": [a.to_dict() for a in self.print_areas],
            "shipping_from": self.shipping_from,
            "print_details": dict(self.print_details),
        }


def build_product_draft(
    title: str,
    description: str,
    blueprint_id: Any,
    print_provider_id: Any,
    variants: Iterable[Any],
    image_id: str,
    background: Optional[str] = config.DEFAULT_BACKGROUND,
    placement: Optional[ImagePlacement] = None,
    position: str = "front",
    shipping_from: Optional[str] = config.DEFAULT_SHIPPING_METHOD,
) -> ProductDraft:
    """Assemble a draft with one print area holding every variant and one image.

    ``variants`` are objects with ``id`` and ``price`` attributes, or dicts
    with those keys.
    """
    placement = placement or ImagePlacement()
    draft_variants = []
    for v in variants:
        if isinstance(v, dict):
            draft_variants.append(DraftVariant(id=v.get("id"), price=v.get("price")))
        else:
            draft_variants.append(DraftVariant(id=v.id, price=v.price))

    image = PlacedImage(id=image_id, placement=placement)
    area = PrintArea(
        position=position,
        variant_ids=[v.id for v in draft_variants],
        background=background,
        placeholders=[Placeholder(position=position, images=[image])],
    )
    return ProductDraft(
        title=title,
        description=description,
        blueprint_id=blueprint_id,
        print_provider_id=print_provider_id,
        variants=draft_variants,
        print_areas=[area],
        shipping_from=shipping_from,
    )
