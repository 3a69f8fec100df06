"""
Tests for chains of operations.
"""

import pytest

from opchain.core.chain import Chain, resolve_thunks
from opchain.core.contracts import ContractBuilder
from opchain.core.engine import Operation
from opchain.core.result import Error, Interrupt, Ok, ValidationError
from opchain.policy.engine import interrupt


@pytest.fixture
def calls():
    return []


@pytest.fixture
def ops(calls):
    """Sum → FailsTypeCheck → DivideByTen, each recording that it ran."""

    def tracked(name, fn):
        def process(params):
            calls.append(name)
            return fn(params)

        return process

    sum_op = Operation(
        "Sum",
        ContractBuilder()
        .parameter("a", type="integer", required=True)
        .parameter("b", type="integer", required=True)
        .build(),
        tracked("Sum", lambda p: {"a": p["a"] + p["b"]}),
    )
    fails_type_check = Operation(
        "FailsTypeCheck",
        ContractBuilder().parameter("a", type="string", required=True).build(),
        tracked("FailsTypeCheck", lambda p: p),
    )
    divide_by_ten = Operation(
        "DivideByTen",
        ContractBuilder().parameter("a", type="integer", required=True).build(),
        tracked("DivideByTen", lambda p: {"a": p["a"] / 10}),
    )
    return {"sum": sum_op, "fails": fails_type_check, "divide": divide_by_ten}


class TestChainRun:
    """Tests for the chain state machine."""

    def test_zero_steps(self):
        assert Chain("empty").run({"a": 1}) == Ok({"a": 1})

    def test_outputs_feed_next_step(self, ops, calls):
        chain = Chain("math").step(ops["sum"]).step(ops["divide"])
        assert chain.run({"a": 40, "b": 60}) == {"a": 10.0}
        assert calls == ["Sum", "DivideByTen"]

    def test_last_value_is_unwrapped(self, ops):
        assert Chain("one").step(ops["sum"]).run({"a": 1, "b": 2}) == {"a": 3}

    def test_failure_stops_chain(self, ops, calls):
        """Steps after the failing one never run; the raw error is returned."""
        chain = Chain("math").step(ops["sum"]).step(ops["fails"]).step(ops["divide"])
        result = chain.run({"a": 1, "b": 2})

        assert result == ValidationError(
            {"a": ["has wrong type; expected type: string, got: 3"]}
        )
        assert calls == ["Sum"]

    def test_name_in_errors(self, ops, calls):
        chain = (
            Chain("math", name_in_errors=True)
            .step(ops["sum"])
            .step(ops["fails"])
            .step(ops["divide"])
        )
        failed_op, result = chain.run({"a": 1, "b": 2})

        assert failed_op is ops["fails"]
        assert isinstance(result, ValidationError)
        assert list(result.errors) == ["a"]
        assert "DivideByTen" not in calls

    def test_opaque_fallback_value_is_not_paired(self):
        op = Operation(
            "fails",
            ContractBuilder().parameter("a", type="string").build(),
            lambda p: p,
            fallback=lambda *args: "recovered",
            fallback_returns=True,
        )
        chain = Chain("c", name_in_errors=True).step(op).step(op)
        assert chain.run({"a": 1}) == "recovered"

    def test_interrupt_stops_chain(self, ops, calls):
        stop = Operation(
            "Stop",
            ContractBuilder().parameter("a").build(),
            lambda p: interrupt("enough"),
        )
        chain = Chain("c").step(ops["sum"]).step(stop).step(ops["divide"])
        assert chain.run({"a": 1, "b": 1}) == Interrupt("enough")
        assert calls == ["Sum"]

    def test_process_error_returned_raw(self, ops):
        failing = Operation("F", ContractBuilder().parameter("a").build(), lambda p: Error({"code": 1}))
        chain = Chain("c").step(ops["sum"]).step(failing)
        assert chain.run({"a": 1, "b": 1}) == Error({"code": 1})


class TestStepOptions:
    """Tests for additional params, conditions and coercion."""

    def test_additional_params_win(self, ops):
        chain = Chain("c").step(ops["sum"], additional_params={"b": 10})
        assert chain.run({"a": 1, "b": 2}) == {"a": 11}

    def test_thunks_resolved_at_step_time(self, ops):
        counter = iter(range(100, 200))
        chain = (
            Chain("c")
            .step(ops["sum"])
            .step(ops["sum"], additional_params={"b": lambda: next(counter)})
        )
        assert chain.run({"a": 1, "b": 1}) == {"a": 102}

    def test_resolve_thunks_leaves_classes(self):
        assert resolve_thunks({"kind": dict, "n": lambda: 1}) == {"kind": dict, "n": 1}

    def test_skipped_last_step_returns_params(self, ops, calls):
        chain = Chain("c").step(ops["sum"]).step(ops["divide"], condition=lambda p: False)
        assert chain.run({"a": 1, "b": 1}) == {"a": 2}
        assert calls == ["Sum"]

    def test_skipped_middle_step_does_not_validate(self, ops, calls):
        """A skipped step carries params forward unchecked."""
        chain = (
            Chain("c")
            .step(ops["sum"])
            .step(ops["fails"], condition=lambda p: False)
            .step(ops["divide"])
        )
        assert chain.run({"a": 10, "b": 10}) == {"a": 2.0}
        assert calls == ["Sum", "DivideByTen"]

    def test_condition_sees_merged_params(self, ops):
        seen = []

        def condition(params):
            seen.append(params)
            return True

        chain = Chain("c").step(ops["sum"], additional_params={"b": 5}, condition=condition)
        chain.run({"a": 1, "b": 1})
        assert seen == [{"a": 1, "b": 5}]

    def test_coerce_before_merge(self, ops):
        chain = Chain("c").step(
            ops["sum"],
            coerce=lambda p: {"a": p["x"], "b": 0},
            additional_params={"b": 2},
        )
        assert chain.run({"x": 5}) == {"a": 7}

    def test_step_is_fluent(self, ops):
        chain = Chain("c")
        assert chain.step(ops["sum"]) is chain
        assert len(chain) == 1
        assert chain.steps[0].operation is ops["sum"]
