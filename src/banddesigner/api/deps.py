"""
FastAPI dependency injection functions.

Provides the shared formula engine and the print service.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from banddesigner.core.config import get_settings
from banddesigner.formula.engine import FormulaEngine
from banddesigner.services.print_service import PrintService


@lru_cache
def get_formula_engine() -> FormulaEngine:
    """
    Get the application-wide formula engine.

    The engine owns the function registry, so custom functions registered
    at startup are visible to every request.
    """
    return FormulaEngine(settings=get_settings())


def get_print_service(
    engine: Annotated[FormulaEngine, Depends(get_formula_engine)],
) -> PrintService:
    """Get a print service bound to the shared engine."""
    return PrintService(engine=engine, settings=get_settings())


# Type aliases for cleaner dependency injection
Engine = Annotated[FormulaEngine, Depends(get_formula_engine)]
Printer = Annotated[PrintService, Depends(get_print_service)]
