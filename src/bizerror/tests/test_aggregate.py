"""Tests for BizErrors aggregation."""

from __future__ import annotations

import pytest

from bizerror import BizError, BizErrors, ContextualError
from bizerror.foundation.errors import EmptyAggregateError, Err, Ok, Result
from bizerror.foundation.testing import CaptureRenderer


class AppError(BizError, auto_start=1000, auto_increment=10):
    pass


class UserNotFound(AppError, message="User not found: {user_id}"):
    user_id: int


class InvalidInput(AppError, code=2001, message="Invalid input: {field}"):
    field: str


class PermissionDenied(AppError, code=3000, message="Permission denied"):
    pass


def populated() -> BizErrors[AppError]:
    errors: BizErrors[AppError] = BizErrors()
    errors.push_simple(UserNotFound(user_id=1))
    errors.push_with_context(InvalidInput(field="name"), "validating form")
    errors.push(PermissionDenied().with_context("admin check"))
    return errors


# ═════════════════════════════════════════════════════════════════════════════
# Empty Aggregate
# ═════════════════════════════════════════════════════════════════════════════


def test_empty_aggregate() -> None:
    errors: BizErrors[AppError] = BizErrors()

    assert errors.is_empty()
    assert len(errors) == 0
    assert not errors
    assert errors.first() is None and errors.last() is None
    assert errors.error_codes() == []
    assert str(errors) == "No errors"
    assert repr(errors) == "BizErrors(count=0)"
    with pytest.raises(EmptyAggregateError):
        errors.code


def test_empty_aggregate_chain() -> None:
    errors: BizErrors[AppError] = BizErrors()

    assert errors.chain_depth() == 1
    assert not errors.chain_contains_code(1000)


# ═════════════════════════════════════════════════════════════════════════════
# Population & Queries
# ═════════════════════════════════════════════════════════════════════════════


def test_push_variants() -> None:
    errors = populated()

    assert len(errors) == 3
    assert [e.context for e in errors] == ["", "validating form", "admin check"]
    assert errors.first().code == 1000
    assert errors.last().code == 3000
    assert errors[1].name == "InvalidInput"
    assert all(e.location.function == "populated" for e in errors)


def test_code_is_first_error_code() -> None:
    errors = populated()

    assert errors.code == 1000
    assert errors.name == "BizErrors"


def test_contains_code_and_error_codes() -> None:
    errors = populated()
    errors.push_simple(UserNotFound(user_id=2))

    assert errors.contains_code(2001)
    assert not errors.contains_code(9999)
    assert errors.error_codes() == [1000, 2001, 3000]


def test_filter_is_lazy_and_ordered() -> None:
    errors = populated()
    matches = errors.filter(lambda e: e.code != 2001)

    assert not isinstance(matches, list)
    assert [e.code for e in matches] == [1000, 3000]


def test_as_list_is_a_copy() -> None:
    errors = populated()
    items = errors.as_list()
    items.clear()

    assert len(errors) == 3


def test_from_errors_mixes_bare_and_wrapped() -> None:
    wrapped = PermissionDenied().with_context("admin check")
    errors = BizErrors.from_errors([UserNotFound(user_id=1), wrapped])

    assert errors[0].context == ""
    assert errors[0].location.function == "test_from_errors_mixes_bare_and_wrapped"
    assert errors[1] is wrapped


# ═════════════════════════════════════════════════════════════════════════════
# Collecting Results
# ═════════════════════════════════════════════════════════════════════════════


def test_collect_from_partitions_results() -> None:
    results: list[Result[int, ContextualError[AppError]]] = [
        Ok(1),
        Err(UserNotFound(user_id=1).with_context("row 2")),
        Ok(2),
        Err(InvalidInput(field="age").with_context("row 4")),
        Ok(3),
    ]

    values, errors = BizErrors.collect_from(results)

    assert values == [1, 2, 3]
    assert errors is not None
    assert len(errors) == 2
    assert errors.error_codes() == [1000, 2001]


def test_collect_from_all_ok() -> None:
    values, errors = BizErrors.collect_from([Ok(1), Ok(2)])

    assert values == [1, 2]
    assert errors is None


def test_collect_errors() -> None:
    errors = BizErrors.collect_errors(iter([Ok(1), Err(PermissionDenied().with_context("x"))]))

    assert errors is not None
    assert errors.code == 3000
    assert BizErrors.collect_errors([]) is None


def test_collect_is_logged(captured_logs: CaptureRenderer) -> None:
    BizErrors.collect_from([Ok(1), Err(PermissionDenied().with_context("x"))])
    captured_logs.assert_logged("results collected", succeeded=1, failed=1)


# ═════════════════════════════════════════════════════════════════════════════
# Rendering & Raising
# ═════════════════════════════════════════════════════════════════════════════


def test_display_single_error() -> None:
    errors = BizErrors([PermissionDenied().with_context("admin check")])
    assert str(errors) == "Permission denied\nContext: admin check"


def test_display_multiple_errors() -> None:
    lines = str(populated()).splitlines()

    assert lines[0] == "Multiple errors occurred (3 total):"
    assert lines[1] == "  1. User not found: 1"
    assert "  2. Invalid input: name" in lines
    assert "  3. Permission denied" in lines


def test_repr_summarizes_beyond_three() -> None:
    errors = populated()
    assert repr(errors).startswith("BizErrors(count=3, codes=[1000, 2001, 3000], errors=[ContextualError(")

    errors.push_simple(UserNotFound(user_id=2))
    text = repr(errors)
    assert text.startswith("BizErrors(count=4, codes=[1000, 2001, 3000, 1000], first_3_errors=[")
    assert text.endswith("note='... and 1 more')")


def test_raised_aggregate_chains_to_first_error() -> None:
    with pytest.raises(BizErrors) as exc_info:
        raise populated()

    errors = exc_info.value
    assert errors.chain_depth() == 3
    assert errors.root_cause_message() == "User not found: 1"
    assert errors.chain_contains_code(1000)
    assert isinstance(errors.find_root(UserNotFound), UserNotFound)
