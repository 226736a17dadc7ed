from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from santa.services.errors import MalformedInputError, UnknownParticipantError


@dataclass(frozen=True)
class Participant:
    id: str
    contact: Optional[str] = None
    excluded: FrozenSet[str] = frozenset()


ParticipantSet = Tuple[Participant, ...]


class ExclusionRelation:
    """Directed "must not give to" relation over participant ids.

    Self pairs are always excluded without being stored.
    """

    def __init__(self, participant_ids: Sequence[str], excluded: Mapping[str, Iterable[str]]) -> None:
        self.participant_ids: Tuple[str, ...] = tuple(participant_ids)
        self._excluded: Dict[str, FrozenSet[str]] = {
            participant_id: frozenset(excluded.get(participant_id, ()))
            for participant_id in self.participant_ids
        }

    def excludes(self, giver: str, receiver: str) -> bool:
        if giver == receiver:
            return True
        return receiver in self._excluded.get(giver, frozenset())

    def permitted(self, giver: str) -> List[str]:
        return [receiver for receiver in self.participant_ids if not self.excludes(giver, receiver)]

    def __len__(self) -> int:
        return len(self.participant_ids)

    def __repr__(self) -> str:
        edges = sum(len(receivers) for receivers in self._excluded.values())
        return f"<ExclusionRelation(participants={len(self)}, exclusions={edges})>"


def parse_participant(raw: Any) -> Participant:
    if isinstance(raw, str):
        parts = raw.split()
        if not parts:
            raise MalformedInputError("Participant entry is empty.")
        contact = " ".join(parts[1:]) or None
        return Participant(id=parts[0], contact=contact)

    if isinstance(raw, Mapping):
        name = raw.get("name") or raw.get("id")
        if not isinstance(name, str) or not name.strip():
            raise MalformedInputError(f"Participant entry {raw!r} has no name.")
        contact = raw.get("contact", raw.get("phone"))
        return Participant(id=name.strip(), contact=str(contact) if contact is not None else None)

    raise MalformedInputError(f"Cannot parse participant entry {raw!r}.")


def parse_pair(raw: Any) -> Tuple[str, str]:
    if isinstance(raw, str):
        names = [name.strip() for name in raw.split(",")]
    elif isinstance(raw, Sequence) and not isinstance(raw, (bytes, bytearray)):
        names = [name.strip() if isinstance(name, str) else name for name in raw]
    else:
        raise MalformedInputError(f"Cannot parse pair entry {raw!r}.")

    if len(names) != 2 or not all(isinstance(name, str) and name for name in names):
        raise MalformedInputError(f"Pair entry {raw!r} must name exactly two participants.")
    return names[0], names[1]


def build(
    participants: Iterable[Any],
    dont_pair: Optional[Iterable[Any]] = None,
    dont_repeat: Optional[Iterable[Any]] = None,
) -> Tuple[ParticipantSet, ExclusionRelation]:
    parsed = [
        participant if isinstance(participant, Participant) else parse_participant(participant)
        for participant in participants
    ]

    ids: List[str] = []
    for participant in parsed:
        if participant.id in ids:
            raise MalformedInputError(f"Participant {participant.id!r} is listed more than once.")
        ids.append(participant.id)

    excluded: Dict[str, set] = {participant.id: set(participant.excluded) for participant in parsed}

    def _check(name: str, source: str) -> None:
        if name not in excluded:
            raise UnknownParticipantError(name, source)

    for entry in dont_pair or []:
        first, second = parse_pair(entry)
        _check(first, "DONT_PAIR")
        _check(second, "DONT_PAIR")
        excluded[first].add(second)
        excluded[second].add(first)

    for entry in dont_repeat or []:
        giver, receiver = parse_pair(entry)
        _check(giver, "DONT_REPEAT")
        _check(receiver, "DONT_REPEAT")
        excluded[giver].add(receiver)

    participant_set: ParticipantSet = tuple(
        Participant(
            id=participant.id,
            contact=participant.contact,
            excluded=frozenset(excluded[participant.id] - {participant.id}),
        )
        for participant in parsed
    )
    relation = ExclusionRelation(ids, {p.id: p.excluded for p in participant_set})
    return participant_set, relation
