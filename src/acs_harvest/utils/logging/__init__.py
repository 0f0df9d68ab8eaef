# ABOUTME: Logging configuration, progress tracking, and output formatting
# ABOUTME: Provides rich console output and structured logging for the pipeline

from .config import LoggingMode, configure_logging, get_logging_status
from .progress import HarvestProgressTracker, ProgressCallback, create_harvest_progress
from .utils import get_logger, log_extraction_step, with_pipeline_context, with_target_context

__all__ = [
    # Configuration
    "LoggingMode",
    "configure_logging",
    "get_logging_status",
    # Progress
    "HarvestProgressTracker",
    "ProgressCallback",
    "create_harvest_progress",
    # Utilities
    "get_logger",
    "log_extraction_step",
    "with_pipeline_context",
    "with_target_context",
]
