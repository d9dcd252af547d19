"""
String cut selectors for physics objects

Cuts are written the way they appear in the monitor configuration, e.g.
"pt > 80" or "pt > 30 && abs(eta) < 2.4", and evaluated against the
attributes of a jet or MET object.
"""

from __future__ import annotations

import ast
import logging
import math
import re
from typing import Any, Dict

from .exceptions import ConfigurationError, SelectionError

# Functions available inside a cut expression
_CUT_FUNCTIONS: Dict[str, Any] = {
    "abs": abs,
    "sqrt": math.sqrt,
    "cos": math.cos,
    "sin": math.sin,
    "min": min,
    "max": max,
    "pi": math.pi,
    "True": True,
    "False": False,
}

_TOKEN_ALIASES = [
    (re.compile(r"&&"), " and "),
    (re.compile(r"\|\|"), " or "),
    (re.compile(r"!(?!=)"), " not "),
]


class _ObjectNamespace(dict):
    """Name lookup that resolves unknown names as attributes of the object."""

    def __init__(self, obj: Any) -> None:
        super().__init__()
        self.obj = obj

    def __missing__(self, name: str) -> Any:
        if name in _CUT_FUNCTIONS:
            return _CUT_FUNCTIONS[name]
        try:
            return getattr(self.obj, name)
        except AttributeError:
            raise SelectionError(
                f"Object {type(self.obj).__name__} has no attribute '{name}' used in cut"
            ) from None


class CutSelector:
    """
    Boolean predicate compiled from a cut string

    An empty cut string accepts every object.
    """

    def __init__(self, expression: str) -> None:
        self.logger = logging.getLogger("RazorMonitor.CutSelector")
        if not isinstance(expression, str):
            raise ConfigurationError(f"Cut must be a string, got {type(expression).__name__}")

        self.expression = expression.strip()
        translated = self.expression or "True"
        for pattern, replacement in _TOKEN_ALIASES:
            translated = pattern.sub(replacement, translated)
        self._translated = translated.strip()

        try:
            self._code = compile(self._translated, f"<cut: {self.expression}>", "eval")
        except SyntaxError as e:
            raise ConfigurationError(f"Invalid cut string '{self.expression}': {e.msg}") from e

        # free names, resolved at evaluation as functions or object attributes
        self.names = sorted({node.id for node in ast.walk(ast.parse(self._translated, mode="eval"))
                             if isinstance(node, ast.Name)} - set(_CUT_FUNCTIONS))

        self.logger.debug(f"Compiled cut '{self.expression}' as '{self._translated}'")

    def __call__(self, obj: Any) -> bool:
        return bool(eval(self._code, {"__builtins__": {}}, _ObjectNamespace(obj)))

    def check(self, obj: Any) -> None:
        """
        Verify that every name in the cut is an attribute of `obj`

        Raises:
            SelectionError: If a name does not resolve
        """
        missing = [name for name in self.names if not hasattr(obj, name)]
        if missing:
            raise SelectionError(
                f"Object {type(obj).__name__} has no attribute(s) {missing} used in cut '{self.expression}'"
            )

    def __repr__(self) -> str:
        return f"CutSelector({self.expression!r})"
