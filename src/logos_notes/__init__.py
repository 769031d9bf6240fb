"""Utilities for syncing Logos notes into Markdown and Readwise."""

from .config import SyncConfig
from .models import DeliveryResult, ProcessedNote, SyncResult

__all__ = ["SyncConfig", "ProcessedNote", "SyncResult", "DeliveryResult"]
