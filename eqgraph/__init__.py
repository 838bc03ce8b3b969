"""eqgraph: equation graph engine with structural validation and constraints."""

from .workspace import EquationWorkspace

__version__ = "0.1.0"

__all__ = ["EquationWorkspace", "__version__"]
