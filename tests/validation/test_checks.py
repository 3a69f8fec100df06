"""
Unit tests for individual checks in the check registry.
"""

import re
from collections import namedtuple
from dataclasses import dataclass
from enum import Enum

import pytest

from opchain.core.result import Error
from opchain.validation.checks import (
    CHECKS,
    MODIFIERS,
    CheckKind,
    CheckResult,
    call_arity,
    canonical_key,
    check_equals,
    check_format,
    check_func,
    check_in,
    check_length,
    check_not_in,
    check_numericality,
    check_required,
    check_struct,
    check_subset_of,
    check_type,
    measure_length,
    positional_arity,
    run_check,
    strict_equal,
)


class Color(Enum):
    RED = "red"
    GREEN = "green"


@dataclass
class User:
    name: str
    age: int


@dataclass
class Admin:
    name: str
    age: int


Pair = namedtuple("Pair", ["left", "right"])


def messages(results):
    if isinstance(results, CheckResult):
        results = [results]
    return [r.message for r in results if not r.passes]


class TestCheckKind:
    """Tests for check kind lookup."""

    def test_every_check_kind_is_dispatchable(self):
        """Each non-modifier kind has an entry in the dispatch table."""
        for kind in CheckKind:
            if kind in MODIFIERS:
                assert kind not in CHECKS
            else:
                assert kind in CHECKS

    def test_aliases_resolve(self):
        """regex, exactly and function resolve to canonical kinds."""
        assert CheckKind.lookup("regex") is CheckKind.FORMAT
        assert CheckKind.lookup("exactly") is CheckKind.EQUALS
        assert CheckKind.lookup("function") is CheckKind.FUNC
        assert CheckKind.lookup("from") is CheckKind.ALIAS

    def test_trailing_underscore_is_stripped(self):
        """Keyword-safe spellings such as in_ map to the plain key."""
        assert canonical_key("in_") == "in"
        assert CheckKind.lookup("in_") is CheckKind.IN

    def test_unknown_key(self):
        assert CheckKind.lookup("whatever") is None
        assert CheckKind.lookup(42) is None


class TestTypeCheck:
    """Tests for the type check."""

    @pytest.mark.parametrize(
        "type_name, value",
        [
            ("boolean", True),
            ("integer", 3),
            ("float", 1.5),
            ("number", 2),
            ("number", 2.5),
            ("string", "s"),
            ("bytes", b"s"),
            ("tuple", (1, 2)),
            ("list", [1]),
            ("set", {1}),
            ("map", {"a": 1}),
            ("keyword", [("a", 1)]),
            ("struct", User("n", 1)),
            ("enum", Color.RED),
            ("callable", len),
            ("module", re),
            ("none", None),
        ],
    )
    def test_matching_values_pass(self, type_name, value):
        result = check_type({"f": value}, "f", type_name)
        assert result.passes

    def test_wrong_type_message(self):
        """The message names the expected type and shows the value."""
        result = check_type({"a": "a"}, "a", "integer")
        assert not result.passes
        assert result.message == "has wrong type; expected type: integer, got: 'a'"

    def test_bool_is_not_a_number(self):
        """Booleans never count as integers, floats or numbers."""
        for type_name in ("integer", "float", "number"):
            assert not check_type({"a": True}, "a", type_name).passes

    def test_absent_value_passes(self):
        assert check_type({}, "a", "integer").passes

    def test_class_reference(self):
        """A class can be given instead of a type name."""
        assert check_type({"u": User("n", 1)}, "u", User).passes
        result = check_type({"u": 1}, "u", User)
        assert result.message == "has wrong type; expected type: User, got: 1"


class TestRequiredCheck:
    """Tests for the required check."""

    def test_absent_fails(self):
        assert check_required({}, "a", True).message == "is required"

    def test_explicit_none_passes(self):
        """Absence and None are different things."""
        assert check_required({"a": None}, "a", True).passes

    def test_not_required(self):
        assert check_required({}, "a", False).passes


class TestNumericalityCheck:
    """Tests for the numericality check."""

    def test_non_number_fails_once(self):
        """A non-number yields a single failure whatever the constraints."""
        results = check_numericality({"a": "x"}, "a", {"greater_than": 0, "less_than": 5})
        assert messages(results) == ["not a number"]

    def test_bool_is_not_a_number(self):
        assert messages(check_numericality({"a": True}, "a", {"gt": 0})) == ["not a number"]

    def test_one_result_per_constraint(self):
        results = check_numericality({"a": 3}, "a", {"gt": 0, "lt": 10, "is": 3})
        assert len(results) == 3
        assert all(r.passes for r in results)

    def test_every_violated_constraint_is_reported(self):
        """k violated constraints give k messages."""
        results = check_numericality(
            {"a": 0},
            "a",
            {"greater_than": 0, "greater_than_or_equal_to": 1, "equal_to": 5},
        )
        assert messages(results) == [
            "must be greater than 0",
            "must be greater than or equal to 1",
            "must be equal to 5",
        ]

    def test_upper_bounds(self):
        results = check_numericality({"a": 10}, "a", {"less_than": 10, "max": 9})
        assert messages(results) == [
            "must be less than 10",
            "must be less than or equal to 9",
        ]

    def test_unknown_constraint_passes(self):
        results = check_numericality({"a": 1}, "a", {"odd": True})
        assert [r.passes for r in results] == [True]


class TestLengthCheck:
    """Tests for the length check."""

    def test_string_length(self):
        results = check_length({"a": "123456"}, "a", {"min": 7})
        assert messages(results) == ["length must be greater than or equal to 7"]

    def test_numbers_pass_through(self):
        assert measure_length(5) == 5

    def test_lengths_by_kind(self):
        assert measure_length([1, 2, 3]) == 3
        assert measure_length({"a": 1}) == 1
        assert measure_length((1, 2)) == 2
        assert measure_length(Color.GREEN) == len("GREEN")
        assert measure_length(User("n", 1)) == 2
        assert measure_length(object()) == 0

    def test_all_bounds(self):
        results = check_length(
            {"a": [1, 2, 3]},
            "a",
            {"gt": 3, "max": 2, "lt": 3, "is": 4},
        )
        assert messages(results) == [
            "length must be greater than 3",
            "length must be less than or equal to 2",
            "length must be less than 3",
            "length must be equal to 4",
        ]

    def test_in_range_pair(self):
        """An (lo, hi) pair is inclusive."""
        assert check_length({"a": "abc"}, "a", {"in": (1, 3)})[0].passes
        results = check_length({"a": "abcd"}, "a", {"in": (1, 3)})
        assert messages(results) == ["length must be in range 1..3"]

    def test_in_python_range(self):
        results = check_length({"a": "abcd"}, "a", {"in": range(1, 4)})
        assert messages(results) == ["length must be in range 1..3"]

    def test_unknown_constraint_fails(self):
        """An unknown sub-check is reported, not ignored."""
        results = check_length({"a": "abc"}, "a", {"min": 1, "around": 3})
        assert messages(results) == ["unknown check 'around'"]


class TestMembershipChecks:
    """Tests for in / not_in."""

    def test_in(self):
        assert check_in({"a": 2}, "a", [1, 2, 3]).passes
        assert check_in({"a": 4}, "a", [1, 2, 3]).message == "must be one of [1, 2, 3]"

    def test_not_in(self):
        assert check_not_in({"a": 4}, "a", [1, 2, 3]).passes
        result = check_not_in({"a": 2}, "a", [1, 2, 3])
        assert result.message == "must not be included in [1, 2, 3]"

    def test_non_list_argument_passes(self):
        assert check_in({"a": 4}, "a", "abc").passes
        assert check_not_in({"a": "a"}, "a", "abc").passes

    def test_unhashable_value_against_set(self):
        """Lists and dicts are compared by equality, never hashed."""
        assert not check_in({"a": ["a"]}, "a", {"a", "b"}).passes
        assert check_not_in({"a": {"k": 1}}, "a", frozenset({"a"})).passes
        assert check_in({"a": "b"}, "a", {"a", "b"}).passes


class TestFormatCheck:
    """Tests for format (regex)."""

    def test_match(self):
        assert check_format({"a": "user@example.com"}, "a", r"^[^@]+@[^@]+$").passes

    def test_compiled_pattern(self):
        assert check_format({"a": "abc"}, "a", re.compile(r"\d")).message == "has invalid format"

    def test_non_string_passes(self):
        assert check_format({"a": 123}, "a", r"^x$").passes


class TestEqualsCheck:
    """Tests for equals (exactly)."""

    def test_equal(self):
        assert check_equals({"a": {"b": [1, 2]}}, "a", {"b": [1, 2]}).passes

    def test_no_numeric_widening(self):
        result = check_equals({"a": 1.0}, "a", 1)
        assert result.message == "must be equal to 1; got: 1.0"

    def test_bool_is_not_int(self):
        assert not strict_equal(True, 1)

    def test_nested_types_must_match(self):
        assert not strict_equal({"a": [1]}, {"a": [1.0]})
        assert not strict_equal([1, 2], (1, 2))


class TestStructCheck:
    """Tests for the struct check."""

    def test_same_class(self):
        assert check_struct({"u": User("n", 1)}, "u", User).passes

    def test_same_fields_different_class(self):
        """Shape identity, not field overlap."""
        result = check_struct({"u": Admin("n", 1)}, "u", User)
        assert result.message == "is not expected struct"

    def test_plain_map_is_not_a_struct(self):
        assert not check_struct({"u": {"name": "n", "age": 1}}, "u", User).passes


class TestSubsetOfCheck:
    """Tests for subset_of."""

    def test_subset(self):
        assert check_subset_of({"a": [1, 2]}, "a", [1, 2, 3]).passes

    def test_not_a_list(self):
        assert check_subset_of({"a": 1}, "a", [1, 2, 3]).message == "must be a list"

    def test_empty_list_fails(self):
        """An empty list is not a subset."""
        result = check_subset_of({"a": []}, "a", [1, 2, 3])
        assert result.message == "must be a subset of [1, 2, 3]"

    def test_foreign_element(self):
        assert not check_subset_of({"a": [1, 4]}, "a", [1, 2, 3]).passes

    def test_unhashable_element_against_set(self):
        result = check_subset_of({"a": [["a"]]}, "a", {"a", "b"})
        assert not result.passes
        assert check_subset_of({"a": ["a"]}, "a", {"a", "b"}).passes


class TestFuncCheck:
    """Tests for custom predicate checks."""

    def test_value_only(self):
        assert check_func({"a": 2}, "a", lambda v: v > 1).passes
        assert check_func({"a": 0}, "a", lambda v: v > 1).message == "isn't valid"

    def test_params_and_value(self):
        def bigger_than_b(params, value):
            return value > params["b"]

        assert check_func({"a": 3, "b": 2}, "a", bigger_than_b).passes
        assert not check_func({"a": 1, "b": 2}, "a", bigger_than_b).passes

    def test_params_field_and_value(self):
        seen = []

        def record(params, field, value):
            seen.append((field, value))
            return True

        assert check_func({"a": 1}, "a", record).passes
        assert seen == [("a", 1)]

    def test_error_with_message(self):
        result = check_func({"a": 1}, "a", lambda v: Error("too small"))
        assert result.message == "too small"

    def test_error_without_message(self):
        assert check_func({"a": 1}, "a", lambda v: Error()).message == "isn't valid"

    def test_truthy_and_none_pass(self):
        """Only False and Error fail."""
        assert check_func({"a": 1}, "a", lambda v: None).passes
        assert check_func({"a": 1}, "a", lambda v: "yes").passes

    def test_optional_parameter_gets_value_only(self):
        def positive(value, strict=True):
            return value > 0 if strict else value >= 0

        assert check_func({"a": 2}, "a", positive).passes
        assert check_func({"a": 0}, "a", positive).message == "isn't valid"

    def test_star_args_get_all_three(self):
        seen = []
        check_func({"a": 1}, "a", lambda *args: seen.append(args))
        assert seen == [({"a": 1}, "a", 1)]

    def test_arity(self):
        """Required and maximum positional counts."""
        assert positional_arity(lambda a: a) == (1, 1)
        assert positional_arity(lambda a, b=1: a) == (1, 2)
        assert positional_arity(lambda a, *args: a) == (1, -1)
        assert positional_arity(lambda a, *, b: a) == (1, 1)

    def test_call_arity_prefers_smallest_shape(self):
        assert call_arity(lambda v, strict=True: v, (1, 2, 3)) == 1
        assert call_arity(lambda p, v: v, (1, 2, 3)) == 2
        assert call_arity(lambda p, f, v=None: v, (1, 2, 3)) == 2
        assert call_arity(lambda *args: args, (1, 2)) == 2


class TestRunCheck:
    """Tests for dispatch."""

    def test_modifiers_produce_nothing(self):
        assert run_check("default", {"a": 1}, "a", 5) == []
        assert run_check("allow_nil", {"a": None}, "a", True) == []

    def test_unknown_kind_passes(self):
        assert run_check("frobnicate", {"a": 1}, "a", 1) == [CheckResult.ok("a")]

    def test_single_result_is_wrapped(self):
        assert run_check("required", {}, "a", True) == [CheckResult.fail("a", "is required")]

    def test_inner_requires_map_like(self):
        from opchain.core.contracts import Contract

        inner = Contract.from_list([("b", {"type": "integer"})])
        assert messages(run_check("inner", {"a": 5}, "a", inner)) == ["has wrong type"]

    def test_inner_accepts_records(self):
        from opchain.core.contracts import Contract

        inner = Contract.from_list([("left", {"type": "integer"})])
        assert messages(run_check("inner", {"a": Pair(1, 2)}, "a", inner)) == []

    def test_list_item_requires_list(self):
        from opchain.core.contracts import FieldSpec

        item = FieldSpec.build("a", {"type": "integer"})
        assert messages(run_check("list_item", {"a": (1, 2)}, "a", item)) == ["is not a list"]
