"""Unit tests for the Product aggregate and its parts."""

import pytest

from mart.domain.exceptions import ValidationError
from mart.domain.model.composition import EntityType
from mart.domain.model.product import Image, PriceTier, Product, Specification, Variant
from tests.fakes import make_product, make_variant


def _tier(lo: int = 1, hi: int | None = None, price: str = "10.00") -> PriceTier:
    return PriceTier.create(lo, hi, price)


class TestPriceTier:

    def test_open_ended_tier_covers_everything_above_min(self):
        tier = _tier(50)
        assert not tier.covers(49)
        assert tier.covers(50)
        assert tier.covers(1_000_000)

    def test_bounded_tier_includes_both_ends(self):
        tier = _tier(10, 49)
        assert tier.covers(10)
        assert tier.covers(49)
        assert not tier.covers(50)

    def test_max_below_min_rejected(self):
        with pytest.raises(ValidationError, match="below min quantity"):
            _tier(50, 10)

    def test_zero_price_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _tier(price="0")

    def test_zero_min_rejected(self):
        with pytest.raises(ValidationError):
            _tier(0)

    def test_overlaps(self):
        assert _tier(1).overlaps(_tier(50))
        assert not _tier(1, 49).overlaps(_tier(50))

    def test_label(self):
        assert _tier(1, 49, "10").label == "1-49 @ $10.00"
        assert _tier(50, None, "8").label == "50+ @ $8.00"

    def test_label_in_other_currency(self):
        tier = PriceTier.create(50, None, "8", currency="SAR")
        assert tier.label == "50+ @ 8.00 SAR"


class TestSpecificationAndImage:

    def test_spec_label_with_unit(self):
        assert Specification("Length", "40", unit="mm").label == "Length: 40 mm"

    def test_spec_needs_value(self):
        with pytest.raises(ValidationError, match="needs a value"):
            Specification("Length", " ")

    def test_image_needs_url(self):
        with pytest.raises(ValidationError, match="URL is required"):
            Image(url="")


class TestVariant:

    def test_create_requires_a_tier(self):
        with pytest.raises(ValidationError, match="at least one price tier"):
            Variant.create(sku="A", price_tiers=[])

    def test_create_requires_sku(self):
        with pytest.raises(ValidationError, match="SKU is required"):
            Variant.create(sku=" ", price_tiers=[_tier()])

    def test_two_primary_images_rejected(self):
        images = [Image("a.png", is_primary=True), Image("b.png", is_primary=True)]
        with pytest.raises(ValidationError, match="primary images"):
            Variant.create(sku="A", price_tiers=[_tier()], images=images)

    def test_primary_image_falls_back_to_first(self):
        variant = Variant.create(
            sku="A", price_tiers=[_tier()], images=[Image("a.png"), Image("b.png")]
        )
        assert variant.primary_image.url == "a.png"

    def test_flagged_primary_image_wins(self):
        variant = Variant.create(
            sku="A",
            price_tiers=[_tier()],
            images=[Image("a.png"), Image("b.png", is_primary=True)],
        )
        assert variant.primary_image.url == "b.png"

    def test_label_falls_back_to_sku(self):
        assert make_variant(name=None, sku="BOLT-M8").label == "BOLT-M8"

    def test_inactive_tiers_excluded(self):
        variant = Variant(
            id="v1", sku="A", price_tiers=[_tier(1), PriceTier.create(50, None, "8", active=False)]
        )
        assert [t.min_quantity.value for t in variant.active_tiers] == [1]


class TestProductCreate:

    def test_happy_path(self):
        product = Product.create(
            name=" Bolt ", sku="B-1", variants=[make_variant()], minimum_order_quantity=10
        )
        assert product.name == "Bolt"
        assert product.minimum_order_quantity == 10
        assert product.id is None

    def test_no_variants_rejected(self):
        with pytest.raises(ValidationError, match="at least one variant"):
            Product.create(name="Bolt", sku="B-1", variants=[])

    def test_zero_moq_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Product.create(
                name="Bolt", sku="B-1", variants=[make_variant()], minimum_order_quantity=0
            )

    def test_duplicate_variant_skus_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate variant SKU"):
            Product.create(
                name="Bolt",
                sku="B-1",
                variants=[make_variant(id="v1", sku="X"), make_variant(id="v2", sku="X")],
            )


class TestProductCompleteness:

    def test_complete_needs_an_image(self):
        product = make_product()
        assert not product.is_complete
        with pytest.raises(ValidationError, match="at least one image"):
            product.assert_complete()

    def test_complete_product(self):
        variant = make_variant()
        variant.images.append(Image("a.png"))
        product = make_product(variants=[variant])
        assert product.is_complete
        product.assert_complete()

    def test_needs_specification(self):
        variant = make_variant()
        variant.images.append(Image("a.png"))
        product = make_product(variants=[variant])
        product.specifications.clear()
        with pytest.raises(ValidationError, match="specification"):
            product.assert_complete()

    def test_find_variant(self):
        product = make_product(variants=[make_variant(id="v1"), make_variant(id="v2", sku="S2")])
        assert product.find_variant("v2").sku == "S2"
        with pytest.raises(ValidationError, match="not found"):
            product.find_variant("v9")


class TestEntityType:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("variant", EntityType.VARIANT),
            ("price-tier", EntityType.PRICE_TIER),
            ("price-tiers", EntityType.PRICE_TIER),
            ("Specifications", EntityType.SPECIFICATION),
        ],
    )
    def test_parse(self, raw, expected):
        assert EntityType.parse(raw) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            EntityType.parse("warehouse")
