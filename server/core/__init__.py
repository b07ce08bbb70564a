"""Core server components for robostate."""

from .config import Settings, get_settings
from .errors import MalformedError, NotFoundError, StateServiceError, UnavailableError
from .fault_aggregator import HISTORICAL_RETENTION, FaultAggregator, aggregate_severities
from .logging_config import configure_logging
from .mesh_store import MeshStore
from .state_service import RobotStateService
from .state_store import StateSnapshot, StateStore

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "StateStore",
    "StateSnapshot",
    "RobotStateService",
    "MeshStore",
    "FaultAggregator",
    "aggregate_severities",
    "HISTORICAL_RETENTION",
    "StateServiceError",
    "NotFoundError",
    "MalformedError",
    "UnavailableError",
]
