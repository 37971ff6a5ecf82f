"""
Finalization: counter reconciliation, segment linking, hero selection and publish readiness.
"""

from itinerary_pipeline.core.finalization.checklist import (
    ReviewOutcome,
    build_blockers,
    build_checklist,
    outcome_notes,
    review_outcome,
)
from itinerary_pipeline.core.finalization.finalizer import Finalizer
from itinerary_pipeline.core.finalization.hero import select_hero_image, select_hero_video
from itinerary_pipeline.core.finalization.reconciler import (
    CounterReconciler,
    ReconcileResult,
    compute_counters,
)
from itinerary_pipeline.core.finalization.segment_linker import (
    group_media_by_key,
    link_segments,
    normalize_key,
    segment_key,
    status_key,
)

__all__ = [
    "CounterReconciler",
    "Finalizer",
    "ReconcileResult",
    "ReviewOutcome",
    "build_blockers",
    "build_checklist",
    "compute_counters",
    "group_media_by_key",
    "link_segments",
    "normalize_key",
    "outcome_notes",
    "review_outcome",
    "segment_key",
    "select_hero_image",
    "select_hero_video",
    "status_key",
]
