from . import aanleg, onderhoud  # noqa: F401  (registers the scope calculators)
from .base import CALCULATORS, compute_scope, get_calculator, parse_input

__all__ = ["CALCULATORS", "compute_scope", "get_calculator", "parse_input"]
