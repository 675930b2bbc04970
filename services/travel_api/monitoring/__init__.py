from services.travel_api.monitoring.metrics import LoggingMetrics, Metrics

__all__ = ["LoggingMetrics", "Metrics"]
