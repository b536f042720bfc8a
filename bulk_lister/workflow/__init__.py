"""Bulk upload session controller"""

from .stages import Stage, WorkflowStateError, TRANSITIONS, CLOSABLE_STAGES
from .session import WorkflowSession
from .controller import BulkUploadWorkflow

__all__ = [
    "Stage",
    "WorkflowStateError",
    "TRANSITIONS",
    "CLOSABLE_STAGES",
    "WorkflowSession",
    "BulkUploadWorkflow",
]
