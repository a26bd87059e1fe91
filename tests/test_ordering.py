# File: /tests/test_ordering.py
import pytest

from viewengine.core.exceptions import ValidationError
from viewengine.engine.ordering import OptimisticOrder, ReorderPhase, move, move_id


def test_move_last_to_second():
    assert move(["A", "B", "C", "D"], 3, 1) == ["A", "D", "B", "C"]


def test_repeating_the_same_move_is_a_no_op():
    once = move(["A", "B", "C", "D"], 3, 1)
    assert move(once, 1, 1) == once
    assert move_id(once, "D", 1) == once


def test_move_rejects_bad_input():
    with pytest.raises(ValidationError):
        move(["A", "B"], 0, 2)
    with pytest.raises(ValidationError):
        move(["A", "A"], 0, 1)
    with pytest.raises(ValidationError):
        move_id(["A", "B"], "Z", 0)


def test_optimistic_confirm():
    order = OptimisticOrder(["A", "B", "C"])
    token = order.propose(2, 0)
    assert order.pending
    assert order.current == ["C", "A", "B"]
    assert order.confirmed == ["A", "B", "C"]
    assert order.confirm(token)
    assert order.phase == ReorderPhase.idle
    assert order.confirmed == ["C", "A", "B"]


def test_optimistic_revert_restores_confirmed_order():
    order = OptimisticOrder(["A", "B", "C"])
    token = order.propose(0, 2)
    assert order.revert(token)
    assert order.current == ["A", "B", "C"]
    assert not order.pending


def test_superseded_answers_are_ignored():
    order = OptimisticOrder(["A", "B", "C"])
    first = order.propose(0, 1)
    second = order.propose(2, 0)
    assert not order.revert(first)
    assert order.current == ["C", "B", "A"]
    assert order.confirm(second)


def test_propose_order_must_be_a_permutation():
    order = OptimisticOrder(["A", "B"])
    with pytest.raises(ValidationError):
        order.propose_order(["A", "C"])
    assert order.current == ["A", "B"]
