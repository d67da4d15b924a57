from media_pipeline.pipeline.ledger import ProgressLedger
from media_pipeline.pipeline.models import Attachment, BatchResult, ProgressEntry, Stage
from media_pipeline.pipeline.orchestrator import Batch, PipelineOrchestrator, build_orchestrator

__all__ = [
    "Attachment",
    "Batch",
    "BatchResult",
    "PipelineOrchestrator",
    "ProgressEntry",
    "ProgressLedger",
    "Stage",
    "build_orchestrator",
]
