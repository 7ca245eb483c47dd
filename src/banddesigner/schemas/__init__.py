"""Schemas for BandDesigner API."""

from banddesigner.schemas import formula, layout, report

__all__ = ["formula", "layout", "report"]
