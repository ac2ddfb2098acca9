from .pacing_service import PacingService, StatisticsCache, dataset_fingerprint

__all__ = ["PacingService", "StatisticsCache", "dataset_fingerprint"]
