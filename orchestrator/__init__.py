"""
Orchestration package for the Marp export pipeline.

Sequences one export call: read document → create staging directory →
rewrite images and write the staging document → invoke the renderer →
classify the outcome.
"""

from .export_orchestrator import (
    ExportOrchestrator,
    MarpCLIError,
    StagingError,
    browser_requirement_message
)

__all__ = [
    'ExportOrchestrator',
    'MarpCLIError',
    'StagingError',
    'browser_requirement_message'
]
