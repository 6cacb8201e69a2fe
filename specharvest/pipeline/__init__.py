"""Run orchestration for the incremental harvest."""

from specharvest.pipeline.orchestrator import RunOrchestrator

__all__ = ["RunOrchestrator"]
