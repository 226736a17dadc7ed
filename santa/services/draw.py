from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from loguru import logger

from santa.core.config import DrawConfig
from santa.db import repo
from santa.services import constraints
from santa.services.constraints import ParticipantSet
from santa.services.reporter import Pair, format_report, report
from santa.services.strategies import DEFAULT_STRATEGY, SearchConfig, get_strategy


@dataclass(frozen=True)
class DrawResult:
    assignment: Dict[str, str]
    pairs: List[Pair]
    participants: ParticipantSet
    strategy: str
    seed: int
    budget: Optional[float] = None
    currency: Optional[str] = None

    @property
    def lines(self) -> List[str]:
        return format_report(self.pairs)


def build_no_repeat_pairs(session, participant_ids) -> List[Tuple[str, str]]:
    draw = repo.get_latest_draw(session)
    if not draw:
        return []

    current = set(participant_ids)
    pairs = []
    for pair in repo.list_draw_pairs(session, draw.id):
        if pair.giver in current and pair.receiver in current:
            pairs.append((pair.giver, pair.receiver))
        else:
            logger.bind(draw_id=draw.id, giver=pair.giver).debug("Skipping pair with absent participant")
    return pairs


def run_draw(
    draw_config: DrawConfig,
    strategy: str = DEFAULT_STRATEGY,
    search_config: Optional[SearchConfig] = None,
    session=None,
) -> DrawResult:
    search_strategy = get_strategy(strategy)
    participants = [constraints.parse_participant(raw) for raw in draw_config.participants]

    dont_repeat = list(draw_config.dont_repeat)
    if session is not None:
        dont_repeat.extend(build_no_repeat_pairs(session, [p.id for p in participants]))

    participant_set, relation = constraints.build(participants, draw_config.dont_pair, dont_repeat)

    search_config = search_config or SearchConfig()
    seed = search_config.seed
    if seed is None:
        seed = random.randint(1, 2**31 - 1)
        search_config = replace(search_config, seed=seed)

    assignment = search_strategy.find_assignment(relation.participant_ids, relation, search_config)
    pairs = report(assignment, relation.participant_ids)

    if session is not None:
        draw = repo.create_draw(session, search_strategy.name, seed, pairs)
        logger.bind(draw_id=draw.id).debug("Draw recorded")

    logger.bind(strategy=search_strategy.name, seed=seed, participants=len(participant_set)).info(
        "Assignments generated"
    )
    return DrawResult(
        assignment=assignment,
        pairs=pairs,
        participants=participant_set,
        strategy=search_strategy.name,
        seed=seed,
        budget=draw_config.budget,
        currency=draw_config.currency,
    )
