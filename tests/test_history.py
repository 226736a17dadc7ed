from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from santa.core.config import DrawConfig
from santa.db import repo
from santa.db.models import Base
from santa.services.draw import build_no_repeat_pairs, run_draw
from santa.services.strategies import SearchConfig


def create_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)()


def test_no_history():
    session = create_session()
    assert repo.get_latest_draw(session) is None
    assert build_no_repeat_pairs(session, ["Alice", "Bob"]) == []


def test_latest_draw_pairs():
    session = create_session()
    repo.create_draw(session, "graph_cycle", 1, [("A", "B"), ("B", "A")])
    latest = repo.create_draw(session, "genetic", 2, [("A", "C"), ("C", "B"), ("B", "A")])
    session.commit()

    assert repo.get_latest_draw(session).id == latest.id
    assert len(repo.list_draws(session)) == 2
    pairs = [(pair.giver, pair.receiver) for pair in repo.list_draw_pairs(session, latest.id)]
    assert pairs == [("A", "C"), ("C", "B"), ("B", "A")]


def test_absent_participants_are_skipped():
    session = create_session()
    repo.create_draw(session, "graph_cycle", 1, [("A", "B"), ("B", "C"), ("C", "A")])
    session.commit()

    assert build_no_repeat_pairs(session, ["A", "B", "D"]) == [("A", "B")]


def test_second_draw_avoids_last_years_pairs():
    session = create_session()
    config = DrawConfig(participants=["Alice", "Bob", "Carol", "Dave"])

    first = run_draw(config, "graph_cycle", SearchConfig(seed=10), session=session)
    session.commit()
    second = run_draw(config, "graph_cycle", SearchConfig(seed=10), session=session)
    session.commit()

    assert not set(first.pairs) & set(second.pairs)
    draws = repo.list_draws(session)
    assert [draw.seed for draw in draws] == [10, 10]
    assert [(pair.giver, pair.receiver) for pair in draws[-1].pairs] == second.pairs
