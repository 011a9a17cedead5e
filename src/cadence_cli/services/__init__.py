"""Services module for Cadence - storage and configuration around the session engine."""

from .config_service import ConfigService, get_config_service
from .history import HistoryLogger
from .plan_store import PlanStore, StoredPlan

__all__ = [
    "ConfigService",
    "HistoryLogger",
    "PlanStore",
    "StoredPlan",
    "get_config_service",
]
