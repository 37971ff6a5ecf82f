"""
Publish readiness.

Derives the publish checklist and the ordered blocker list from reconciled
counters, hero selection, schema validation and meta fields. The overall
outcome is review readiness and is independent of the job's pipeline status.

Dependencies: pydantic models only
System role: Pure decision logic used by the finalizer
"""

from enum import Enum

from itinerary_pipeline.models.itinerary import BlockerSeverity, PublishBlocker, PublishChecklist
from itinerary_pipeline.models.job import JobCounters
from itinerary_pipeline.models.schema_report import SchemaStatus, SchemaValidationResult


class ReviewOutcome(str, Enum):
    READY_FOR_REVIEW = "ready_for_review"
    NEEDS_ATTENTION = "needs_attention"


def build_checklist(
    counters: JobCounters,
    hero_image_id: str | None,
    schema_generated: bool,
    validation: SchemaValidationResult,
    meta_title: str | None,
    meta_description: str | None,
) -> PublishChecklist:
    resolved = counters.processed_images + counters.skipped_images
    return PublishChecklist(
        all_images_processed=resolved >= counters.total_images,
        no_failed_images=counters.failed_images == 0,
        hero_image_selected=bool(hero_image_id),
        content_enhanced=False,
        schema_generated=schema_generated,
        schema_valid=validation.status != SchemaStatus.FAIL,
        meta_fields_filled=bool(meta_title and meta_description),
    )


def build_blockers(
    checklist: PublishChecklist,
    counters: JobCounters,
    validation: SchemaValidationResult,
) -> list[PublishBlocker]:
    """
    Blockers in fixed order: errors first, then warnings.

    Each failed checklist item contributes at most one blocker.
    """
    blockers: list[PublishBlocker] = []

    def add(reason: str, severity: BlockerSeverity) -> None:
        blockers.append(PublishBlocker(reason=reason, severity=severity))

    if not checklist.all_images_processed:
        unprocessed = counters.total_images - counters.processed_images - counters.skipped_images
        add(f"{unprocessed} images not yet processed", BlockerSeverity.ERROR)
    if not checklist.no_failed_images:
        add(f"{counters.failed_images} images failed to process", BlockerSeverity.ERROR)
    if not checklist.hero_image_selected:
        add("No hero image selected", BlockerSeverity.ERROR)
    if not checklist.schema_valid:
        add(f"Schema validation failed: {'; '.join(validation.errors)}", BlockerSeverity.ERROR)

    if not checklist.content_enhanced:
        add("Content not yet enhanced (use Enhance buttons)", BlockerSeverity.WARNING)
    if not checklist.meta_fields_filled:
        add("Meta title or description missing", BlockerSeverity.WARNING)
    if validation.warnings:
        add(f"Schema has {len(validation.warnings)} warning(s)", BlockerSeverity.WARNING)
    return blockers


def review_outcome(blockers: list[PublishBlocker]) -> ReviewOutcome:
    if any(b.severity == BlockerSeverity.ERROR for b in blockers):
        return ReviewOutcome.NEEDS_ATTENTION
    return ReviewOutcome.READY_FOR_REVIEW


def outcome_notes(outcome: ReviewOutcome, blockers: list[PublishBlocker]) -> str:
    """Job notes text recording the review outcome."""
    reasons = ", ".join(b.reason for b in blockers) or "None"
    return f"Final status: {outcome.value}. Blockers: {reasons}"
