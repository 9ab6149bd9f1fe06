"""Canvas catalog resolution.

Resolves the canvas blueprint, its print provider and that provider's size
variants, then matches the variants against the price table:

    IDLE -> BLUEPRINT_LOOKUP -> PROVIDER_LOOKUP -> VARIANT_LOOKUP
         -> VARIANT_FILTER -> READY

Any step can end in ERROR. Each step yields a StepResult; a "not found" is a
LookupFailure value, not an exception, and the first failure ends the run.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar

import config
from errors import PrintifyError, PrintifyTransportError, RelayError
from pricing import desired_size_table, price_for_size
from relay import PrintifyRelay
from sizes import normalize_size_label, size_sort_key

logger = logging.getLogger(__name__)

T = TypeVar("T")

SHIPPING_METHODS = ("standard", "express")


class ResolverState(str, Enum):
    IDLE = "idle"
    BLUEPRINT_LOOKUP = "blueprint_lookup"
    PROVIDER_LOOKUP = "provider_lookup"
    VARIANT_LOOKUP = "variant_lookup"
    VARIANT_FILTER = "variant_filter"
    READY = "ready"
    ERROR = "error"


@dataclass
class LookupFailure:
    kind: str       # blueprint_not_found, provider_not_found, variants_not_found,
                    # no_matching_variants, upstream_error, transport_error
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    status_code: int = 404

    def to_dict(self) -> dict:
        return {"message": self.message, "kind": self.kind, "context": self.context}


@dataclass
class StepResult(Generic[T]):
    value: Optional[T] = None
    failure: Optional[LookupFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "StepResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: str, message: str, context: Optional[dict] = None, status_code: int = 404) -> "StepResult[T]":
        return cls(failure=LookupFailure(kind, message, context or {}, status_code))


@dataclass
class CanvasVariant:
    id: int
    title: str
    size: str           # normalized size label, e.g. 6" x 6"
    price: int          # cents, from the price table
    options: Dict[str, Any] = field(default_factory=dict)
    is_enabled: bool = True

    @property
    def orientation(self) -> Optional[str]:
        return self.options.get("orientation")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "size": self.size,
            "price": self.price,
            "options": self.options,
            "is_enabled": self.is_enabled,
        }


@dataclass
class ResolvedCatalog:
    blueprint: dict
    provider: dict
    variants: List[CanvasVariant]
    shipping: Dict[str, Dict[str, int]]
    warnings: List[str] = field(default_factory=list)

    @property
    def blueprint_id(self):
        return self.blueprint.get("id")

    @property
    def provider_id(self):
        return self.provider.get("id")

    def to_dict(self) -> dict:
        return {
            "blueprint": {"id": self.blueprint_id, "title": self.blueprint.get("title")},
            "provider": {"id": self.provider_id, "title": self.provider.get("title")},
            "variants": [v.to_dict() for v in self.variants],
            "shipping": self.shipping,
            "warnings": self.warnings,
        }


def variant_size_label(variant: Mapping[str, Any]) -> Optional[str]:
    """Raw size label of a variant: options.size, else the title's first segment."""
    options = variant.get("options") or {}
    size = options.get("size") if isinstance(options, dict) else None
    if not size:
        title = variant.get("title") or ""
        size = title.split(" / ")[0].strip() if title else None
    return size or None


def filter_variants(
    variants: Mapping[str, Mapping[str, Any]],
    price_table: Optional[Dict[str, int]] = None,
) -> List[CanvasVariant]:
    """Keep variants whose normalized size is in the price table, priced from it.

    Iteration order of ``variants`` is irrelevant; the result is sorted by
    numeric size.
    """
    table = desired_size_table(price_table)
    matched = []
    for variant in variants.values():
        raw_size = variant_size_label(variant)
        if not raw_size:
            continue
        price = price_for_size(raw_size, table)
        if price is None:
            continue
        options = dict(variant.get("options") or {})
        matched.append(CanvasVariant(
            id=variant["id"],
            title=variant.get("title", ""),
            size=normalize_size_label(raw_size),
            price=price,
            options=options,
        ))
    return sort_variants(matched)


def sort_variants(variants: List[CanvasVariant]) -> List[CanvasVariant]:
    return sorted(variants, key=lambda v: size_sort_key(v.size))


def format_shipping(payload: Any) -> Dict[str, Dict[str, int]]:
    """Shipping table as {method: {first_item, additional_items, handling_time}}.

    Missing methods or fields become 0.
    """
    data = payload
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        data = payload["data"]
    if not isinstance(data, dict):
        data = {}
    shipping = {}
    for method in SHIPPING_METHODS:
        info = data.get(method) or {}
        shipping[method] = {
            "first_item": info.get("first_item") or 0,
            "additional_items": info.get("additional_items") or 0,
            "handling_time": info.get("handling_time") or 0,
        }
    return shipping


class CatalogResolver:
    """Resolves blueprint -> provider -> priced, sorted variants."""

    def __init__(
        self,
        relay: PrintifyRelay,
        blueprint_title: str = config.CANVAS_BLUEPRINT_TITLE,
        price_table: Optional[Dict[str, int]] = None,
    ):
        self.relay = relay
        self.blueprint_title = blueprint_title
        self.price_table = price_table
        self.state = ResolverState.IDLE
        self.failure: Optional[LookupFailure] = None
        self.result: Optional[ResolvedCatalog] = None

    def _enter(self, state: ResolverState):
        logger.debug("Catalog resolver: %s -> %s", self.state.value, state.value)
        self.state = state

    def _fail(self, result: StepResult) -> StepResult:
        self.failure = result.failure
        self._enter(ResolverState.ERROR)
        logger.warning("Catalog resolution failed (%s): %s", result.failure.kind, result.failure.message)
        return result

    async def _call(self, coro, not_found_kind: str = "upstream_error") -> StepResult:
        """Await a relay call, turning relay errors into failures."""
        try:
            return StepResult.success(await coro)
        except PrintifyTransportError as e:
            return StepResult.fail("transport_error", e.message, {"body": e.body}, e.status_code)
        except PrintifyError as e:
            return StepResult.fail("upstream_error", e.message, {"body": e.body}, e.status_code)
        except RelayError as e:
            context = dict(e.body) if isinstance(e.body, dict) else {"body": e.body}
            context.pop("message", None)
            return StepResult.fail(not_found_kind, e.message, context, e.status_code)

    async def lookup_blueprint(self) -> StepResult[dict]:
        result = await self._call(self.relay.list_blueprints())
        if not result.ok:
            return result
        for blueprint in result.value.get("data", []):
            if blueprint.get("title") == self.blueprint_title:
                return StepResult.success(blueprint)
        return StepResult.fail(
            "blueprint_not_found",
            "Canvas blueprint not found in catalog",
            {"title": self.blueprint_title},
        )

    async def lookup_provider(self, blueprint_id) -> StepResult[dict]:
        result = await self._call(
            self.relay.list_blueprint_providers(blueprint_id), "provider_not_found",
        )
        if not result.ok:
            return result
        providers = result.value.get("data", [])
        if not providers:
            return StepResult.fail(
                "provider_not_found",
                "No print providers available",
                {"available_providers": []},
            )
        return StepResult.success(providers[0])

    async def lookup_variants_and_shipping(self, blueprint_id, provider_id):
        """Fetch variants and shipping concurrently; both are awaited before returning."""
        return await asyncio.gather(
            self._call(self.relay.list_variants(blueprint_id, provider_id), "variants_not_found"),
            self._call(self.relay.get_shipping(blueprint_id, provider_id)),
        )

    async def resolve(self) -> StepResult[ResolvedCatalog]:
        self.failure = None
        self.result = None

        self._enter(ResolverState.BLUEPRINT_LOOKUP)
        blueprint = await self.lookup_blueprint()
        if not blueprint.ok:
            return self._fail(blueprint)

        self._enter(ResolverState.PROVIDER_LOOKUP)
        provider = await self.lookup_provider(blueprint.value["id"])
        if not provider.ok:
            return self._fail(provider)

        self._enter(ResolverState.VARIANT_LOOKUP)
        variants, shipping = await self.lookup_variants_and_shipping(
            blueprint.value["id"], provider.value["id"],
        )
        if not variants.ok:
            return self._fail(variants)

        warnings = []
        if shipping.ok:
            shipping_info = format_shipping(shipping.value)
        else:
            warnings.append(f"Shipping info unavailable: {shipping.failure.message}")
            shipping_info = format_shipping({})

        self._enter(ResolverState.VARIANT_FILTER)
        matched = filter_variants(variants.value.get("data", {}), self.price_table)
        if not matched:
            return self._fail(StepResult.fail(
                "no_matching_variants",
                "No matching variants found for the desired sizes",
                {"available_sizes": sorted({
                    variant_size_label(v) or "" for v in variants.value.get("data", {}).values()
                })},
            ))

        self.result = ResolvedCatalog(
            blueprint=blueprint.value,
            provider=provider.value,
            variants=matched,
            shipping=shipping_info,
            warnings=warnings,
        )
        self._enter(ResolverState.READY)
        logger.info(
            "Catalog ready: blueprint %s, provider %s, %d variants",
            self.result.blueprint_id, self.result.provider.get("title"), len(matched),
        )
        return StepResult.success(self.result)
