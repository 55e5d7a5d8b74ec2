"""Registry of analysis checks."""

from __future__ import annotations

from typing import Callable, List

from ..context import AnalysisContext
from ..issues import Diagnostic

from . import injection

Check = Callable[[AnalysisContext], List[Diagnostic]]

CHECKS: list[Check] = [
    injection.run,
]

__all__ = ["CHECKS"]
