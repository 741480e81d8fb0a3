from .counters import CounterReconciler
from .analytics_service import AnalyticsService

__all__ = ["CounterReconciler", "AnalyticsService"]
