from santa.services.constraints import build
from santa.services.validation import (
    conflicted_positions,
    count_conflicts,
    is_valid_assignment,
    ring_to_assignment,
)


def relation():
    _, exclusions = build(
        ["Alice", "Bob", "Carol", "Dave"],
        dont_pair=["Alice, Bob"],
        dont_repeat=["Carol, Dave"],
    )
    return exclusions


def test_ring_to_assignment_wraps_around():
    assert ring_to_assignment(["A", "B", "C"]) == {"A": "B", "B": "C", "C": "A"}


def test_valid_assignment():
    assignment = {"Alice": "Carol", "Carol": "Bob", "Bob": "Dave", "Dave": "Alice"}
    assert is_valid_assignment(assignment, relation())


def test_reverse_of_dont_repeat_is_allowed():
    _, exclusions = build(["Carol", "Dave", "Erin"], dont_repeat=["Carol, Dave"])
    assert is_valid_assignment({"Carol": "Erin", "Erin": "Dave", "Dave": "Carol"}, exclusions)
    assert not is_valid_assignment({"Carol": "Dave", "Dave": "Erin", "Erin": "Carol"}, exclusions)


def test_multi_cycle_assignment_is_valid():
    assignment = {"Alice": "Carol", "Carol": "Alice", "Bob": "Dave", "Dave": "Bob"}
    assert is_valid_assignment(assignment, relation())


def test_excluded_pair_is_invalid():
    assignment = {"Alice": "Bob", "Bob": "Carol", "Carol": "Dave", "Dave": "Alice"}
    assert not is_valid_assignment(assignment, relation())


def test_self_pair_is_invalid():
    _, exclusions = build(["Alice", "Bob", "Carol"])
    assert not is_valid_assignment({"Alice": "Alice", "Bob": "Carol", "Carol": "Bob"}, exclusions)


def test_missing_giver_is_invalid():
    assert not is_valid_assignment({"Alice": "Carol", "Carol": "Alice", "Bob": "Dave"}, relation())


def test_duplicate_receiver_is_invalid():
    assignment = {"Alice": "Carol", "Bob": "Carol", "Carol": "Alice", "Dave": "Alice"}
    assert not is_valid_assignment(assignment, relation())


def test_unknown_receiver_is_invalid():
    assignment = {"Alice": "Carol", "Carol": "Alice", "Bob": "Dave", "Dave": "Zed"}
    assert not is_valid_assignment(assignment, relation())


def test_conflicted_positions():
    ring = ["Alice", "Bob", "Carol", "Dave"]
    assert conflicted_positions(ring, relation()) == [0, 2]
    assert count_conflicts(ring, relation()) == 2
    assert count_conflicts(["Alice", "Carol", "Bob", "Dave"], relation()) == 0
