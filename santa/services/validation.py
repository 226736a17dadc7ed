from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from santa.services.constraints import ExclusionRelation


def ring_to_assignment(ring: Sequence[str]) -> Dict[str, str]:
    size = len(ring)
    return {giver: ring[(index + 1) % size] for index, giver in enumerate(ring)}


def conflicted_positions(ring: Sequence[str], relation: ExclusionRelation) -> List[int]:
    size = len(ring)
    return [
        index
        for index, giver in enumerate(ring)
        if relation.excludes(giver, ring[(index + 1) % size])
    ]


def count_conflicts(ring: Sequence[str], relation: ExclusionRelation) -> int:
    return len(conflicted_positions(ring, relation))


def is_valid_assignment(assignment: Mapping[str, str], relation: ExclusionRelation) -> bool:
    participants = set(relation.participant_ids)
    if set(assignment.keys()) != participants:
        return False

    receivers = list(assignment.values())
    if len(receivers) != len(participants) or set(receivers) != participants:
        return False

    return all(not relation.excludes(giver, receiver) for giver, receiver in assignment.items())
