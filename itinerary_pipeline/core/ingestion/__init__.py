"""
Pipeline composition and Lambda entrypoints.
"""

from itinerary_pipeline.core.ingestion.entrypoint import IngestionPipeline
from itinerary_pipeline.core.ingestion.orchestrator import IntakeOrchestrator

__all__ = ["IngestionPipeline", "IntakeOrchestrator"]
