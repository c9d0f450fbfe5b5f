"""Calculator adapter over an external unit-aware expression evaluator."""

import logging
import math
import re
from abc import ABC, abstractmethod
from numbers import Number
from typing import Callable, Optional, Tuple

from .worker import BackgroundWorker

logger = logging.getLogger(__name__)

INIT_TASK = "calculator"

# Classification patterns, all anchored at the start so that application
# names with digits in the middle ("Windows 10") still reach app search.
CALCULATION_PATTERNS = [
    re.compile(r'^[-+(]*\d+(?:\.\d+)?\s*[-+*/^%]\s*[-+(]*\d'),   # 2+2, 5*3, (1+2)*3
    re.compile(r'^\d+(?:\.\d+)?\s*[^\W\d_]'),                     # 5km, 100 USD
    re.compile(r'^\d+\.?\d*$'),                                   # plain numbers
]

_CONVERSION = re.compile(r'^(?P<source>.+?\S)\s+(?:to|->)\s+(?P<target>\S.*)$', re.IGNORECASE)
_CONVERSION_IN = re.compile(r'^(?P<source>.+\S)\s+in\s+(?P<target>\S.*)$', re.IGNORECASE)


def is_calculator_query(query: str) -> bool:
    """
    Check whether a query looks like a calculation.

    Args:
        query: Raw query text

    Returns:
        True if the query should be routed to the calculator
    """
    trimmed = query.strip()
    if not trimmed:
        return False
    return any(pattern.search(trimmed) for pattern in CALCULATION_PATTERNS)


def split_conversion(expression: str) -> Tuple[str, Optional[str]]:
    """
    Split "<expr> to <unit>" (or "in", "->") into its two sides.

    Returns:
        Tuple of (expression, target unit or None)
    """
    for pattern in (_CONVERSION, _CONVERSION_IN):
        match = pattern.match(expression.strip())
        if match:
            return match.group("source"), match.group("target")
    return expression.strip(), None


def format_number(value) -> str:
    """Format a numeric result without float noise."""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return f"{value:.10g}"
    return str(value)


class Evaluator(ABC):
    """Abstract base class for expression evaluators."""

    @abstractmethod
    def evaluate(self, expression: str) -> Optional[str]:
        """
        Evaluate an expression.

        Returns:
            Formatted value, or None if the input is not a complete calculation
        """
        pass


class PintEvaluator(Evaluator):
    """Evaluator built on the pint unit registry."""

    def __init__(self):
        # Building the registry parses pint's unit definitions and is slow
        import pint
        self._ureg = pint.UnitRegistry(autoconvert_offset_to_baseunit=True)
        self._quantity = self._ureg.Quantity

    def evaluate(self, expression: str) -> Optional[str]:
        source, target = split_conversion(expression)
        if not source:
            return None
        try:
            value = self._ureg.parse_expression(source)
            if target is not None:
                if not isinstance(value, self._quantity):
                    value = self._quantity(value)
                value = value.to(target)
            return self._format(value)
        except Exception as e:
            logger.debug("Could not evaluate %r: %s", expression, e)
            return None

    def _format(self, value) -> Optional[str]:
        if isinstance(value, self._quantity):
            magnitude = format_number(value.magnitude)
            units = f"{value.units:~P}"
            return f"{magnitude} {units}" if units else magnitude
        if isinstance(value, Number):
            return format_number(value)
        return None


def create_evaluator(engine_name: str = "pint") -> Evaluator:
    """
    Create an evaluator instance.

    Args:
        engine_name: Name of the evaluator to create

    Returns:
        Evaluator instance

    Raises:
        ValueError: If engine name is unknown
    """
    engine = engine_name.lower()
    if engine == "pint":
        return PintEvaluator()
    raise ValueError(f"Unknown calculator '{engine}'. Use 'pint'")


class CalculatorAdapter:
    """Wraps an evaluator that is constructed in the background."""

    def __init__(self, factory: Optional[Callable[[], Evaluator]] = None):
        """
        Initialize the adapter.

        Args:
            factory: Zero-argument callable building the evaluator (defaults to pint)
        """
        self._factory = factory or create_evaluator
        self._evaluator: Optional[Evaluator] = None
        self._starting = False
        self.init_error: Optional[BaseException] = None

    @property
    def is_ready(self) -> bool:
        return self._evaluator is not None

    @property
    def is_initializing(self) -> bool:
        return self._starting

    def start(self, worker: BackgroundWorker):
        """Construct the evaluator on the background worker (tagged INIT_TASK)."""
        if self.is_ready or self._starting:
            return None
        self._starting = True
        self.init_error = None
        return worker.submit(INIT_TASK, self._factory)

    def attach(self, evaluator: Evaluator) -> None:
        """Install the evaluator built in the background."""
        self._evaluator = evaluator
        self._starting = False
        logger.info("Calculator ready")

    def fail(self, error: BaseException) -> None:
        """Record a failed background construction."""
        self._starting = False
        self.init_error = error
        logger.warning("Calculator unavailable: %s", error)

    def evaluate(self, expression: str) -> Optional[str]:
        """
        Evaluate an expression.

        Returns:
            Result string, or None if not ready or evaluation failed
        """
        if self._evaluator is None:
            return None
        try:
            return self._evaluator.evaluate(expression)
        except Exception as e:
            logger.debug("Evaluator raised on %r: %s", expression, e)
            return None


__all__ = [
    "INIT_TASK",
    "is_calculator_query",
    "split_conversion",
    "format_number",
    "Evaluator",
    "PintEvaluator",
    "create_evaluator",
    "CalculatorAdapter",
]
