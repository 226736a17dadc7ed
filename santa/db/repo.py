from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select

from santa.db.models import Draw, DrawPair


def create_draw(
    session,
    strategy: str,
    seed: Optional[int],
    pairs: Iterable[Tuple[str, str]],
) -> Draw:
    draw = Draw(strategy=strategy, seed=seed)
    draw.pairs = [DrawPair(giver=giver, receiver=receiver) for giver, receiver in pairs]
    session.add(draw)
    session.flush()
    return draw


def get_latest_draw(session) -> Optional[Draw]:
    return session.scalar(select(Draw).order_by(Draw.id.desc()).limit(1))


def list_draws(session) -> List[Draw]:
    return list(session.scalars(select(Draw).order_by(Draw.id)).all())


def list_draw_pairs(session, draw_id: int) -> List[DrawPair]:
    return list(
        session.scalars(
            select(DrawPair).where(DrawPair.draw_id == draw_id).order_by(DrawPair.id)
        ).all()
    )
