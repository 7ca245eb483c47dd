"""Core configuration and utilities for BandDesigner."""

from banddesigner.core.config import settings
from banddesigner.core.logging import setup_logging

__all__ = ["settings", "setup_logging"]
