# 参考文档: DESIGN.md
# 点单编排引擎

from .backend_service import BackendService
from .catalog import CatalogReader, apply_fixed_selections, build_snapshot, search_loose_items
from .exceptions import BackendError, CompositionError, SessionNotFoundError
from .manager import SessionManager
from .models import (
    CatalogSnapshot, CompositionSession, CurrentDraft, DraftOrder, OrderType,
    SubmissionReport, ValidationError
)
from .store import CompositionStore
from .submission import SubmissionCoordinator, build_line_items

__all__ = [
    "BackendService",
    "CatalogReader",
    "apply_fixed_selections",
    "build_snapshot",
    "search_loose_items",
    "BackendError",
    "CompositionError",
    "SessionNotFoundError",
    "SessionManager",
    "CatalogSnapshot",
    "CompositionSession",
    "CurrentDraft",
    "DraftOrder",
    "OrderType",
    "SubmissionReport",
    "ValidationError",
    "CompositionStore",
    "SubmissionCoordinator",
    "build_line_items",
]
