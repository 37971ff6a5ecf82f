"""
Tests for JSON-LD generation and validation.
"""

from datetime import date

import pytest

from itinerary_pipeline.core.schema import SchemaGenerator, format_validation_result, validate_schema
from itinerary_pipeline.core.schema.generator import image_urls, price_valid_until
from itinerary_pipeline.core.transform.rich_text import text_to_rich_text
from itinerary_pipeline.models.itinerary import FaqItem, InvestmentLevel, Itinerary, Overview
from itinerary_pipeline.models.media import Media
from itinerary_pipeline.models.schema_report import SchemaStatus

TODAY = date(2026, 6, 1)


@pytest.fixture
def itinerary() -> Itinerary:
    """Provide a finalized itinerary with pricing and FAQs."""
    return Itinerary(
        id="it-1",
        title="Kenya Highlights",
        slug="kenya-highlights",
        itinerary_id="itin-123",
        overview=Overview(nights=3, countries=[{"country": "Kenya"}, {"country": "Tanzania"}]),
        investment_level=InvestmentLevel(from_price=12500),
        meta_description="Three nights in the Chyulu Hills.",
        faq_items=[
            FaqItem(question="What is included at Ol Donyo?", answer=text_to_rich_text("All meals.")),
            FaqItem(question="What is included at Unknown Camp?", answer=text_to_rich_text("Meals.")),
            FaqItem(question="Empty answer?", answer={}),
        ],
    )


@pytest.fixture
def media() -> list[Media]:
    """Provide image and video media records."""
    return [
        Media(id="m1", source_s3_key="a.jpg", imgix_url="https://cdn.test/a.jpg"),
        Media(id="m2", source_s3_key="b.jpg", url="https://s3.test/b.jpg"),
        Media(id="v1", source_s3_key="v.m3u8", imgix_url="https://cdn.test/v.mp4", media_type="video"),
    ]


@pytest.fixture
def generator() -> SchemaGenerator:
    return SchemaGenerator("https://kiuli.test/", "safaris")


class TestSchemaGenerator:
    """Test suite for JSON-LD block generation."""

    def test_generate_should_emit_product_faq_and_breadcrumbs(self, generator, itinerary, media) -> None:
        """Should produce the three blocks in order."""
        blocks = generator.generate(itinerary, media, "m2", today=TODAY)

        assert [b["@type"] for b in blocks] == ["Product", "FAQPage", "BreadcrumbList"]
        assert all(b["@context"] == "https://schema.org" for b in blocks)

    def test_product_should_carry_offer_and_properties(self, generator, itinerary, media) -> None:
        """Should describe price, validity and trip properties."""
        product = generator.product(itinerary, media, "m2", today=TODAY)

        assert product["url"] == "https://kiuli.test/safaris/kenya-highlights"
        assert product["image"] == ["https://s3.test/b.jpg", "https://cdn.test/a.jpg"]
        assert product["offers"]["price"] == 12500
        assert product["offers"]["priceCurrency"] == "USD"
        assert product["offers"]["priceValidUntil"] == "2027-06-01"
        assert product["additionalProperty"][0]["value"] == "3 nights"
        assert product["additionalProperty"][1]["value"] == "Kenya, Tanzania"

    def test_product_should_fall_back_without_meta_description(self, generator, itinerary) -> None:
        """Should synthesise a description and zero price."""
        bare = itinerary.model_copy(
            update={"meta_description": None, "investment_level": InvestmentLevel(), "overview": Overview()}
        )

        product = generator.product(bare, [], None, today=TODAY)

        assert product["description"] == "A 7-night luxury safari through Africa"
        assert product["offers"]["price"] == 0
        assert product["image"] == []

    def test_faq_should_drop_placeholder_and_empty_items(self, generator, itinerary) -> None:
        """Should keep only real questions with answers."""
        faq = generator.faq_page(itinerary)

        assert [q["name"] for q in faq["mainEntity"]] == ["What is included at Ol Donyo?"]
        assert faq["mainEntity"][0]["acceptedAnswer"]["text"] == "All meals."

    def test_faq_should_be_omitted_when_nothing_remains(self, generator, itinerary) -> None:
        """Should return None without usable FAQ items."""
        assert generator.faq_page(itinerary.model_copy(update={"faq_items": []})) is None

    def test_breadcrumbs_should_be_positioned(self, generator, itinerary) -> None:
        """Should build Home, Safaris and the itinerary page."""
        items = generator.breadcrumbs(itinerary)["itemListElement"]

        assert [(i["position"], i["name"], i["item"]) for i in items] == [
            (1, "Home", "https://kiuli.test"),
            (2, "Safaris", "https://kiuli.test/safaris"),
            (3, "Kenya Highlights", "https://kiuli.test/safaris/kenya-highlights"),
        ]

    def test_image_urls_should_cap_and_dedupe(self) -> None:
        """Should return at most ten distinct URLs with the hero first."""
        many = [Media(id=f"m{i}", source_s3_key=f"{i}.jpg", url=f"https://s3.test/{i}.jpg") for i in range(15)]

        urls = image_urls(many, "m12")

        assert len(urls) == 10
        assert urls[0] == "https://s3.test/12.jpg"
        assert len(set(urls)) == 10

    def test_price_valid_until_should_handle_leap_day(self) -> None:
        """Should clamp 29 February to 28 February."""
        assert price_valid_until(date(2028, 2, 29)) == "2029-02-28"


class TestValidateSchema:
    """Test suite for JSON-LD validation."""

    def test_generated_schema_should_pass(self, generator, itinerary, media) -> None:
        """Should pass the blocks the generator produces."""
        result = validate_schema(generator.generate(itinerary, media, "m1", today=TODAY), today=TODAY)

        assert result.status == SchemaStatus.PASS
        assert result.errors == [] and result.warnings == []

    @pytest.mark.parametrize(
        "blocks, error",
        [
            ({"@type": "Product"}, "Schema must be an array"),
            ([], "Schema array is empty"),
            ([{"@context": "https://schema.org", "@type": "BreadcrumbList", "itemListElement": []}], "Missing required Product schema"),
        ],
    )
    def test_structural_problems_should_fail(self, blocks, error) -> None:
        """Should fail malformed or incomplete schema."""
        result = validate_schema(blocks, today=TODAY)

        assert result.status == SchemaStatus.FAIL
        assert error in result.errors

    def test_product_without_images_should_fail(self, generator, itinerary) -> None:
        """Should require at least one image."""
        result = validate_schema(generator.generate(itinerary, [], None, today=TODAY), today=TODAY)

        assert result.status == SchemaStatus.FAIL
        assert "[0] Product.image is required" in result.errors

    def test_advisory_issues_should_warn(self, generator, itinerary, media) -> None:
        """Should warn for stale prices, unknown types and missing breadcrumbs."""
        product = generator.product(itinerary, media, None, today=date(2024, 1, 1))

        result = validate_schema([product, {"@context": "https://schema.org", "@type": "Event"}], today=TODAY)

        assert result.status == SchemaStatus.WARN
        assert result.warnings == [
            "[0] Product.offers.priceValidUntil is in the past",
            "[1] Unknown schema type: Event",
            "Missing BreadcrumbList schema",
        ]

    def test_wrong_context_and_bad_breadcrumb_should_error(self) -> None:
        """Should flag the context and each broken breadcrumb field."""
        blocks = [
            {"@context": "http://schema.org", "@type": "Product", "name": "X", "image": "https://cdn.test/a.jpg", "offers": {"@type": "Offer", "price": 1, "priceCurrency": "USD", "availability": "x"}, "description": "d"},
            {"@context": "https://schema.org", "@type": "BreadcrumbList", "itemListElement": [{"@type": "ListItem", "position": "1", "name": "", "item": "/relative"}]},
        ]

        result = validate_schema(blocks, today=TODAY)

        assert result.errors == [
            '[0] @context must be "https://schema.org"',
            "[1] Breadcrumb[0] position must be a number",
            "[1] Breadcrumb[0] name is required",
            "[1] Breadcrumb[0] item must be a valid URL",
        ]

    def test_format_should_list_errors_and_warnings(self) -> None:
        """Should render a readable multi-line report."""
        result = validate_schema([], today=TODAY)

        assert format_validation_result(result) == "Schema validation: FAIL\nErrors:\n  - Schema array is empty"
