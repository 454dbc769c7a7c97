from .manager import FeatureSetsStagingService, OperationResult, ensure_stage_directory, load_project

__all__ = ["FeatureSetsStagingService", "OperationResult", "ensure_stage_directory", "load_project"]
