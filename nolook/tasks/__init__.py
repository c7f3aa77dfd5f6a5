"""Background tasks module."""

from nolook.tasks.ingestion import IngestionOutcome, IngestionPipeline, run_ingestion

__all__ = ["IngestionOutcome", "IngestionPipeline", "run_ingestion"]
