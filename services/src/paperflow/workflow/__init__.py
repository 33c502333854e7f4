"""Document workflow engine for supervised thesis papers."""

from __future__ import annotations

from .consistency import ConsistencyVerifier
from .service import PaperWorkflowService
from .service_errors import WorkflowError
from .settings import WorkflowSettings, get_settings

__version__ = "0.1.0"

__all__ = [
    "ConsistencyVerifier",
    "PaperWorkflowService",
    "WorkflowError",
    "WorkflowSettings",
    "__version__",
    "get_settings",
]
