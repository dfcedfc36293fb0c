"""Structured session events and timing spans for interview sessions."""
from .logger import HUMAN_FIELDS, log_event
from .tracing import span

__all__ = ["HUMAN_FIELDS", "log_event", "span"]
