"""Product aggregate: a product with its variants, images, specifications
and quantity-tiered prices.

The Product owns its Variants and Specifications; each Variant owns its
PriceTiers and Images. Use the ``create()`` factories for new data; they
enforce the composition invariants. The plain constructors stay permissive
so repositories can reconstitute backend records without re-validating.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mart.domain.exceptions import ValidationError
from mart.domain.model.value_objects import Money, Quantity


@dataclass(frozen=True)
class PriceTier:
    """A quantity range with a per-unit price.

    ``max_quantity`` of None means the range has no upper end.
    """

    min_quantity: Quantity
    max_quantity: Quantity | None
    price_per_unit: Money
    active: bool = True
    id: str | None = None

    def __post_init__(self) -> None:
        if self.price_per_unit.is_zero:
            raise ValidationError("Tier price per unit must be positive")
        if (
            self.max_quantity is not None
            and self.max_quantity.value < self.min_quantity.value
        ):
            raise ValidationError(
                f"Tier max quantity {self.max_quantity} is below "
                f"min quantity {self.min_quantity}"
            )

    def covers(self, quantity: int) -> bool:
        if quantity < self.min_quantity.value:
            return False
        return self.max_quantity is None or quantity <= self.max_quantity.value

    def overlaps(self, other: PriceTier) -> bool:
        lo = max(self.min_quantity.value, other.min_quantity.value)
        return self.covers(lo) and other.covers(lo)

    @property
    def label(self) -> str:
        upper = "+" if self.max_quantity is None else f"-{self.max_quantity}"
        return f"{self.min_quantity}{upper} @ {self.price_per_unit}"

    @staticmethod
    def create(
        min_quantity: int,
        max_quantity: int | None,
        price_per_unit: str | int | float,
        active: bool = True,
        id: str | None = None,
        currency: str = "USD",
    ) -> PriceTier:
        return PriceTier(
            min_quantity=Quantity(min_quantity),
            max_quantity=Quantity(max_quantity) if max_quantity is not None else None,
            price_per_unit=Money.of(price_per_unit, currency),
            active=active,
            id=id,
        )


@dataclass(frozen=True)
class Image:
    url: str
    alt_text: str | None = None
    display_order: int | None = None
    is_primary: bool = False
    id: str | None = None

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise ValidationError("Image URL is required")


@dataclass(frozen=True)
class Specification:
    name: str
    value: str
    unit: str | None = None
    display_order: int | None = None
    id: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Specification name is required")
        if not self.value or not self.value.strip():
            raise ValidationError(f"Specification '{self.name}' needs a value")

    @property
    def label(self) -> str:
        return f"{self.name}: {self.value}{' ' + self.unit if self.unit else ''}"


@dataclass
class Variant:
    """A purchasable configuration of a product (size, colour, grade...)."""

    id: str | None
    sku: str
    name: str | None = None
    base_price: Money | None = None
    additional_price: Money | None = None
    available: bool = True
    price_tiers: list[PriceTier] = field(default_factory=list)
    images: list[Image] = field(default_factory=list)

    @staticmethod
    def create(
        sku: str,
        price_tiers: list[PriceTier],
        images: list[Image] | None = None,
        name: str | None = None,
        base_price: Money | None = None,
        additional_price: Money | None = None,
        available: bool = True,
        id: str | None = None,
    ) -> Variant:
        """Create a variant, enforcing its invariants."""
        if not sku or not sku.strip():
            raise ValidationError("Variant SKU is required")
        if not price_tiers:
            raise ValidationError(f"Variant '{sku}' must have at least one price tier")

        images = list(images or [])
        primaries = [img for img in images if img.is_primary]
        if len(primaries) > 1:
            raise ValidationError(
                f"Variant '{sku}' has {len(primaries)} primary images, at most one allowed"
            )

        return Variant(
            id=id,
            sku=sku.strip(),
            name=name,
            base_price=base_price,
            additional_price=additional_price,
            available=available,
            price_tiers=list(price_tiers),
            images=images,
        )

    @property
    def label(self) -> str:
        return self.name or self.sku

    @property
    def active_tiers(self) -> list[PriceTier]:
        return [t for t in self.price_tiers if t.active]

    @property
    def primary_image(self) -> Image | None:
        """The image flagged primary, or by convention the first one."""
        for image in self.images:
            if image.is_primary:
                return image
        return self.images[0] if self.images else None


@dataclass
class Product:
    """Aggregate root for a catalog product."""

    id: str | None
    name: str
    sku: str
    description: str | None = None
    base_price: Money | None = None
    minimum_order_quantity: int = 1
    available: bool = True
    is_bulk_only: bool = False
    category_id: str | None = None
    seller_id: str | None = None
    weight: float | None = None
    weight_unit: str | None = None
    dimensions: str | None = None
    variants: list[Variant] = field(default_factory=list)
    specifications: list[Specification] = field(default_factory=list)

    # --- Factory (used for NEW or edited products) ----------------------------

    @staticmethod
    def create(
        name: str,
        sku: str,
        variants: list[Variant],
        specifications: list[Specification] | None = None,
        minimum_order_quantity: int = 1,
        id: str | None = None,
        **attributes,
    ) -> Product:
        """Create a product, enforcing all invariants."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if not sku or not sku.strip():
            raise ValidationError("Product SKU is required")
        if not variants:
            raise ValidationError("Product must have at least one variant")

        # Raises ValidationError for zero / negative values
        moq = Quantity(minimum_order_quantity).value

        skus = [v.sku for v in variants]
        duplicates = sorted({s for s in skus if skus.count(s) > 1})
        if duplicates:
            raise ValidationError(f"Duplicate variant SKU(s): {', '.join(duplicates)}")

        return Product(
            id=id,
            name=name.strip(),
            sku=sku.strip(),
            minimum_order_quantity=moq,
            variants=list(variants),
            specifications=list(specifications or []),
            **attributes,
        )

    # --- Queries --------------------------------------------------------------

    @property
    def images(self) -> list[Image]:
        return [image for variant in self.variants for image in variant.images]

    @property
    def is_complete(self) -> bool:
        """Has everything a publishable product needs."""
        return bool(self.variants and self.specifications and self.images) and all(
            v.price_tiers for v in self.variants
        )

    def assert_complete(self) -> None:
        if not self.variants:
            raise ValidationError("Product must have at least one variant")
        if not self.specifications:
            raise ValidationError("Product must have at least one specification")
        if not self.images:
            raise ValidationError("Product must have at least one image")
        for variant in self.variants:
            if not variant.price_tiers:
                raise ValidationError(
                    f"Variant '{variant.sku}' must have at least one price tier"
                )

    def find_variant(self, variant_id: str) -> Variant:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        raise ValidationError(
            f"Variant '{variant_id}' not found on product '{self.name}'"
        )
