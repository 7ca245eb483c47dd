"""
BandDesigner - band-based report and label designer.

Provides the formula engine used by calculated fields, the geometry and
selection engine behind the design surface, and print pagination that
turns a design and a dataset into printed pages.
"""

__version__ = "0.1.0"
__author__ = "BandDesigner Team"
__license__ = "MIT"

__all__ = ["__version__"]
