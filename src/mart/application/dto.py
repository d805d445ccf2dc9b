"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from mart.domain.exceptions import ProductCreationFailed, SubEntityCreationFailed
from mart.domain.model.composition import EntityType
from mart.domain.model.quote import Quote

# --- Product composition input ------------------------------------------------
#
# A draft with ``id=None`` is new and will be created; a draft carrying an
# id refers to an existing record and will be updated.


@dataclass(frozen=True)
class PriceTierDraft:
    min_quantity: int
    price_per_unit: str
    max_quantity: int | None = None
    active: bool = True
    id: str | None = None


@dataclass(frozen=True)
class ImageDraft:
    url: str
    alt_text: str | None = None
    display_order: int | None = None
    is_primary: bool = False
    id: str | None = None


@dataclass(frozen=True)
class SpecificationDraft:
    name: str
    value: str
    unit: str | None = None
    display_order: int | None = None
    id: str | None = None


@dataclass(frozen=True)
class VariantDraft:
    sku: str
    name: str | None = None
    base_price: str | None = None
    additional_price: str | None = None
    available: bool = True
    price_tiers: list[PriceTierDraft] = field(default_factory=list)
    images: list[ImageDraft] = field(default_factory=list)
    id: str | None = None


@dataclass(frozen=True)
class ProductDraft:
    """Input: everything a seller entered on the product form."""

    name: str
    sku: str
    description: str | None = None
    base_price: str | None = None
    minimum_order_quantity: int = 1
    available: bool = True
    is_bulk_only: bool = False
    category_id: str | None = None
    weight: float | None = None
    weight_unit: str | None = None
    dimensions: str | None = None
    variants: list[VariantDraft] = field(default_factory=list)
    specifications: list[SpecificationDraft] = field(default_factory=list)
    id: str | None = None

    @property
    def is_update(self) -> bool:
        return self.id is not None


# --- Product composition output -----------------------------------------------


class CompositionOutcome(Enum):
    FULL_SUCCESS = "FULL_SUCCESS"
    PARTIAL_SUCCESS = "PARTIAL_SUCCESS"
    TOTAL_FAILURE = "TOTAL_FAILURE"


@dataclass(frozen=True)
class SubEntityResult:
    """Output: what happened to one variant/image/specification/tier."""

    entity_type: EntityType
    label: str
    success: bool
    error: SubEntityCreationFailed | None = None
    entity_id: str | None = None


@dataclass(frozen=True)
class CompositionResult:
    """Output: the classified outcome of saving a whole product."""

    outcome: CompositionOutcome
    product_id: str | None
    sub_results: list[SubEntityResult] = field(default_factory=list)
    error: ProductCreationFailed | None = None

    @property
    def failures(self) -> list[SubEntityResult]:
        return [r for r in self.sub_results if not r.success]

    @property
    def successes(self) -> list[SubEntityResult]:
        return [r for r in self.sub_results if r.success]

    @property
    def product_saved(self) -> bool:
        return self.outcome is not CompositionOutcome.TOTAL_FAILURE


# --- Quotes -------------------------------------------------------------------


@dataclass(frozen=True)
class QuoteItemSpec:
    """Input: which variant of which product, and how many."""

    product_id: str
    variant_id: str
    quantity: int


@dataclass(frozen=True)
class QuoteLineItemDTO:
    id: str
    product_name: str
    variant_label: str
    quantity: int
    quoted_price: str  # formatted, e.g. "$15.00"
    total_price: str


@dataclass(frozen=True)
class QuoteDTO:
    """Output: a complete quote as displayed to the user."""

    id: str
    quote_number: str
    buyer_id: str
    seller_id: str
    status: str
    valid_until: str
    items: list[QuoteLineItemDTO]
    subtotal: str
    tax_amount: str
    total_amount: str
    notes: str | None

    @staticmethod
    def from_domain(quote: Quote) -> QuoteDTO:
        return QuoteDTO(
            id=quote.id,  # type: ignore[arg-type]
            quote_number=quote.quote_number,
            buyer_id=quote.buyer_id,
            seller_id=quote.seller_id,
            status=quote.status.value,
            valid_until=quote.valid_until.isoformat(),
            items=[
                QuoteLineItemDTO(
                    id=item.id,
                    product_name=item.product_name,
                    variant_label=item.variant_label,
                    quantity=item.quantity.value,
                    quoted_price=str(item.quoted_price),
                    total_price=str(item.total_price),
                )
                for item in quote.items
            ],
            subtotal=str(quote.subtotal),
            tax_amount=str(quote.tax_amount),
            total_amount=str(quote.total_amount),
            notes=quote.notes,
        )


@dataclass(frozen=True)
class PriceCheckDTO:
    """Output: the price a buyer would pay for a variant/quantity selection."""

    product_name: str
    variant_label: str
    quantity: int
    minimum_order_quantity: int
    meets_minimum: bool
    suggested_quantity: int
    unit_price: str
    line_total: str
    price_breaks: list[str]
