"""
JSON-LD validation.

Checks generated blocks against rich-result requirements. Errors make the
markup unusable (status ``fail``); warnings are advisory (status ``warn``).

Dependencies: pydantic models only
System role: Pure collaborator called by the finalizer
"""

from datetime import date
from typing import Any, Callable
from urllib.parse import urlparse

from itinerary_pipeline.core.schema.generator import SCHEMA_CONTEXT
from itinerary_pipeline.models.schema_report import SchemaStatus, SchemaValidationResult

MAX_NAME_LENGTH = 150
MAX_DESCRIPTION_LENGTH = 5000


def is_valid_url(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class _Report:
    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def result(self) -> SchemaValidationResult:
        if self.errors:
            status = SchemaStatus.FAIL
        elif self.warnings:
            status = SchemaStatus.WARN
        else:
            status = SchemaStatus.PASS
        return SchemaValidationResult(status=status, errors=self.errors, warnings=self.warnings)


def _validate_product(block: dict[str, Any], prefix: str, report: _Report, today: date) -> None:
    name = block.get("name")
    if not isinstance(name, str) or not name:
        report.errors.append(f"{prefix} Product.name is required and must be a string")
    else:
        if name.strip() != name:
            report.warnings.append(f"{prefix} Product.name has leading/trailing whitespace")
        if len(name) > MAX_NAME_LENGTH:
            report.warnings.append(f"{prefix} Product.name exceeds {MAX_NAME_LENGTH} characters")

    image = block.get("image")
    if not image:
        report.errors.append(f"{prefix} Product.image is required")
    elif isinstance(image, list):
        invalid = [url for url in image if not is_valid_url(url)]
        if invalid:
            report.errors.append(f"{prefix} Product.image has {len(invalid)} invalid URL(s)")
        if len(set(image)) < len(image):
            report.warnings.append(f"{prefix} Product.image array contains duplicates")
    elif not is_valid_url(image):
        report.errors.append(f"{prefix} Product.image URL is invalid")

    offers = block.get("offers")
    if offers:
        if offers.get("@type") != "Offer":
            report.errors.append(f'{prefix} Product.offers.@type must be "Offer"')
        if isinstance(offers.get("price"), bool) or not isinstance(offers.get("price"), (int, float, str)):
            report.warnings.append(f"{prefix} Product.offers.price should be a number or string")
        if not offers.get("priceCurrency"):
            report.warnings.append(f"{prefix} Product.offers.priceCurrency is recommended")
        if not offers.get("availability"):
            report.warnings.append(f"{prefix} Product.offers.availability is recommended")
        valid_until = offers.get("priceValidUntil")
        if valid_until:
            try:
                if date.fromisoformat(str(valid_until)[:10]) < today:
                    report.warnings.append(f"{prefix} Product.offers.priceValidUntil is in the past")
            except ValueError:
                report.warnings.append(f"{prefix} Product.offers.priceValidUntil is not a valid date")
    else:
        report.warnings.append(f"{prefix} Product.offers is recommended for price display")

    description = block.get("description")
    if not description:
        report.warnings.append(f"{prefix} Product.description is recommended")
    elif len(description) > MAX_DESCRIPTION_LENGTH:
        report.warnings.append(f"{prefix} Product.description exceeds {MAX_DESCRIPTION_LENGTH} characters")

    if block.get("url") and not is_valid_url(block["url"]):
        report.errors.append(f"{prefix} Product.url is invalid")

    brand = block.get("brand")
    if brand:
        if not brand.get("@type"):
            report.warnings.append(f'{prefix} Product.brand.@type should be "Brand" or "Organization"')
        if not brand.get("name"):
            report.warnings.append(f"{prefix} Product.brand.name is recommended")


def _validate_faq_page(block: dict[str, Any], prefix: str, report: _Report, today: date) -> None:
    entities = block.get("mainEntity")
    if not isinstance(entities, list):
        report.errors.append(f"{prefix} FAQPage.mainEntity must be an array")
        return
    if not entities:
        report.warnings.append(f"{prefix} FAQPage.mainEntity is empty")
        return
    for index, faq in enumerate(entities):
        faq_prefix = f"{prefix} FAQ[{index}]"
        answer = (faq.get("acceptedAnswer") or {}).get("text")
        if faq.get("@type") != "Question":
            report.errors.append(f'{faq_prefix} @type must be "Question"')
        if not faq.get("name"):
            report.errors.append(f"{faq_prefix} missing question (name)")
        if not answer:
            report.errors.append(f"{faq_prefix} missing answer text")
        if faq.get("name") and "unknown" in faq["name"].lower():
            report.warnings.append(f'{faq_prefix} contains "Unknown" in question')
        if answer and "unknown" in answer.lower():
            report.warnings.append(f'{faq_prefix} contains "Unknown" in answer')


def _validate_breadcrumbs(block: dict[str, Any], prefix: str, report: _Report, today: date) -> None:
    items = block.get("itemListElement")
    if not isinstance(items, list):
        report.errors.append(f"{prefix} BreadcrumbList.itemListElement must be an array")
        return
    if not items:
        report.warnings.append(f"{prefix} BreadcrumbList.itemListElement is empty")
        return
    for index, item in enumerate(items):
        item_prefix = f"{prefix} Breadcrumb[{index}]"
        if item.get("@type") != "ListItem":
            report.errors.append(f'{item_prefix} @type must be "ListItem"')
        if isinstance(item.get("position"), bool) or not isinstance(item.get("position"), int):
            report.errors.append(f"{item_prefix} position must be a number")
        if not item.get("name"):
            report.errors.append(f"{item_prefix} name is required")
        if not is_valid_url(item.get("item")):
            report.errors.append(f"{item_prefix} item must be a valid URL")


_VALIDATORS: dict[str, Callable[[dict[str, Any], str, _Report, date], None]] = {
    "Product": _validate_product,
    "FAQPage": _validate_faq_page,
    "BreadcrumbList": _validate_breadcrumbs,
}


def validate_schema(blocks: Any, today: date | None = None) -> SchemaValidationResult:
    """
    Validate a list of JSON-LD blocks.

    A Product block is required; a BreadcrumbList is recommended.
    """
    today = today or date.today()
    report = _Report()
    if not isinstance(blocks, list):
        report.errors.append("Schema must be an array")
        return report.result()
    if not blocks:
        report.errors.append("Schema array is empty")
        return report.result()

    seen: set[str] = set()
    for index, block in enumerate(blocks):
        prefix = f"[{index}]"
        if not isinstance(block, dict):
            report.errors.append(f"{prefix} Invalid schema object")
            continue
        if block.get("@context") != SCHEMA_CONTEXT:
            report.errors.append(f'{prefix} @context must be "{SCHEMA_CONTEXT}"')
        block_type = block.get("@type")
        validator = _VALIDATORS.get(block_type)
        if validator is None:
            report.warnings.append(f"{prefix} Unknown schema type: {block_type}")
            continue
        seen.add(block_type)
        validator(block, prefix, report, today)

    if "Product" not in seen:
        report.errors.append("Missing required Product schema")
    if "BreadcrumbList" not in seen:
        report.warnings.append("Missing BreadcrumbList schema")
    return report.result()


def format_validation_result(result: SchemaValidationResult) -> str:
    lines = [f"Schema validation: {result.status.value.upper()}"]
    if result.errors:
        lines.append("Errors:")
        lines.extend(f"  - {error}" for error in result.errors)
    if result.warnings:
        lines.append("Warnings:")
        lines.extend(f"  - {warning}" for warning in result.warnings)
    return "\n".join(lines)
