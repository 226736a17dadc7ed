import pytest

from santa.core.config import DrawConfig
from santa.services.draw import run_draw
from santa.services.errors import UnknownParticipantError, UnsatisfiableError
from santa.services.strategies import SearchConfig

CONFIG = DrawConfig(
    participants=["Alice 1001", "Bob 1002", "Carol 1003", "Dave 1004"],
    dont_pair=["Alice, Bob"],
    dont_repeat=["Carol, Dave"],
    budget=25,
    currency="EUR",
)


def test_run_draw_reports_every_participant():
    result = run_draw(CONFIG, "graph_cycle", SearchConfig(seed=5))

    assert result.strategy == "graph_cycle"
    assert result.seed == 5
    assert result.budget == 25
    assert [participant.id for participant in result.participants] == ["Alice", "Bob", "Carol", "Dave"]
    assert result.pairs[0][0] == "Alice"
    assert sorted(giver for giver, _ in result.pairs) == ["Alice", "Bob", "Carol", "Dave"]
    assert ("Alice", "Bob") not in result.pairs
    assert ("Bob", "Alice") not in result.pairs
    assert ("Carol", "Dave") not in result.pairs
    assert result.lines[0] == f"Alice got {result.assignment['Alice']} for Secret Santa."


def test_run_draw_picks_a_seed():
    result = run_draw(CONFIG, "retry_shuffle", SearchConfig(max_attempts=500))
    assert isinstance(result.seed, int)
    again = run_draw(CONFIG, "retry_shuffle", SearchConfig(seed=result.seed, max_attempts=500))
    assert again.assignment == result.assignment


def test_run_draw_unknown_participant():
    config = DrawConfig(participants=["Alice", "Bob"], dont_pair=["Alice, Zed"])
    with pytest.raises(UnknownParticipantError):
        run_draw(config)


def test_run_draw_unsatisfiable():
    config = DrawConfig(participants=["Alice", "Bob", "Carol"], dont_pair=["Alice, Bob"])
    with pytest.raises(UnsatisfiableError):
        run_draw(config, "min_conflicts", SearchConfig(seed=1))


def test_run_draw_unknown_strategy():
    with pytest.raises(ValueError):
        run_draw(CONFIG, "hill_climbing")
