"""Tests for the calculator adapter and query heuristic."""

from __future__ import annotations

import pytest

from nlauncher.calculator import (
    INIT_TASK,
    CalculatorAdapter,
    create_evaluator,
    format_number,
    is_calculator_query,
    split_conversion,
)

from .conftest import FakeEvaluator


class TestHeuristic:
    """Test is_calculator_query()."""

    @pytest.mark.parametrize("query", ["2+2", "5 * 3", "(1+2)*3", "-4 + 1", "5km to miles", "100 USD", "42", "3.14"])
    def test_calculations(self, query: str) -> None:
        assert is_calculator_query(query)

    @pytest.mark.parametrize("query", ["", "   ", "firefox", "Windows 10", "ps chrome", "code 2"])
    def test_non_calculations(self, query: str) -> None:
        assert not is_calculator_query(query)


class TestHelpers:
    """Test expression helpers."""

    def test_split_conversion_to(self) -> None:
        assert split_conversion("5 km to miles") == ("5 km", "miles")

    def test_split_conversion_in(self) -> None:
        assert split_conversion("10 kg in lb") == ("10 kg", "lb")

    def test_split_conversion_arrow(self) -> None:
        assert split_conversion("3 h -> min") == ("3 h", "min")

    def test_split_conversion_plain(self) -> None:
        assert split_conversion(" 2+2 ") == ("2+2", None)

    def test_format_number(self) -> None:
        assert format_number(4.0) == "4"
        assert format_number(0.1 + 0.2) == "0.3"
        assert format_number(7) == "7"
        assert format_number(1 / 3) == "0.3333333333"


class TestCalculatorAdapter:
    """Test the adapter lifecycle."""

    def test_not_ready_returns_none(self) -> None:
        adapter = CalculatorAdapter(lambda: FakeEvaluator({"2+2": "4"}))
        assert not adapter.is_ready
        assert adapter.evaluate("2+2") is None

    def test_start_builds_in_background(self, immediate_worker) -> None:
        adapter = CalculatorAdapter(lambda: FakeEvaluator({"2+2": "4"}))

        adapter.start(immediate_worker)
        assert adapter.is_initializing
        # A second start while initializing is ignored
        adapter.start(immediate_worker)

        [task] = immediate_worker.drain()
        assert task.kind == INIT_TASK
        adapter.attach(task.value)

        assert adapter.is_ready
        assert not adapter.is_initializing
        assert adapter.evaluate("2+2") == "4"
        assert adapter.evaluate("2+") is None

    def test_failed_construction(self, immediate_worker) -> None:
        def factory():
            raise RuntimeError("no units")

        adapter = CalculatorAdapter(factory)
        adapter.start(immediate_worker)
        [task] = immediate_worker.drain()
        adapter.fail(task.error)

        assert not adapter.is_ready
        assert not adapter.is_initializing
        assert isinstance(adapter.init_error, RuntimeError)

    def test_evaluator_exception_is_contained(self) -> None:
        class Exploding(FakeEvaluator):
            def evaluate(self, expression):
                raise ZeroDivisionError("division by zero")

        adapter = CalculatorAdapter()
        adapter.attach(Exploding())
        assert adapter.evaluate("1/0") is None

    def test_unknown_engine(self) -> None:
        with pytest.raises(ValueError):
            create_evaluator("wolfram")


class TestPintEvaluator:
    """Test the pint-backed evaluator."""

    @pytest.fixture(scope="class")
    def evaluator(self):
        pytest.importorskip("pint")
        return create_evaluator("pint")

    def test_arithmetic(self, evaluator) -> None:
        assert evaluator.evaluate("2+2") == "4"
        assert evaluator.evaluate("5 * 3") == "15"

    def test_unit_conversion(self, evaluator) -> None:
        assert evaluator.evaluate("1 km to m") == "1000 m"

    def test_incomplete_expression(self, evaluator) -> None:
        assert evaluator.evaluate("2 +") is None

    def test_incompatible_units(self, evaluator) -> None:
        assert evaluator.evaluate("5 kg to m") is None
