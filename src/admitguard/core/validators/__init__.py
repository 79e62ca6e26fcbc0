"\"\"\"Strict and soft rule validators.\"\"\""

from .soft import SoftValidator, compute_age, evaluate_soft
from .strict import StrictValidator, evaluate_strict

__all__ = [
    "StrictValidator",
    "SoftValidator",
    "evaluate_strict",
    "evaluate_soft",
    "compute_age",
]
