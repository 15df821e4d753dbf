"""Structured logging for niftyscan runs."""

from niftyscan.core.logging.config import LogConfig
from niftyscan.core.logging.logger import configure_logging, current_trace_id, log_context, logger

__all__ = ["LogConfig", "configure_logging", "current_trace_id", "log_context", "logger"]
