from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from loguru import logger

from santa.services.constraints import Participant

Pair = Tuple[str, str]


@dataclass(frozen=True)
class Notification:
    giver: str
    contact: str
    text: str


def report(assignment: Mapping[str, str], order: Optional[Sequence[str]] = None) -> List[Pair]:
    """Order an assignment as giver/receiver pairs, one cycle after another.

    Each cycle starts at the first participant of ``order`` (defaults to the
    assignment's own key order) that has not been reported yet, so a ring
    reads P0 -> P1 -> ... and ends back at P0.
    """
    pairs: List[Pair] = []
    reported = set()
    for start in order if order is not None else list(assignment):
        giver = start
        while giver not in reported:
            reported.add(giver)
            receiver = assignment[giver]
            pairs.append((giver, receiver))
            giver = receiver
    return pairs


def format_line(giver: str, receiver: str) -> str:
    return f"{giver} got {receiver} for Secret Santa."


def format_report(pairs: Iterable[Pair]) -> List[str]:
    return [format_line(giver, receiver) for giver, receiver in pairs]


def format_budget(budget: Optional[float], currency: Optional[str] = None) -> Optional[str]:
    if budget is None:
        return None
    amount = int(budget) if float(budget).is_integer() else budget
    if not currency:
        return str(amount)
    return f"{amount} {currency.upper()}"


def compose_notifications(
    pairs: Iterable[Pair],
    participants: Iterable[Participant],
    budget: Optional[float] = None,
    currency: Optional[str] = None,
) -> List[Notification]:
    contacts = {participant.id: participant.contact for participant in participants}
    budget_text = format_budget(budget, currency)

    notifications: List[Notification] = []
    for giver, receiver in pairs:
        contact = contacts.get(giver)
        if not contact:
            logger.bind(giver=giver).warning("No contact handle, skipping notification")
            continue

        message_lines = [f"Secret Santa: You're giving a gift to {html.escape(receiver)}!"]
        if budget_text:
            message_lines.append("")
            message_lines.append(f"Budget: {html.escape(budget_text)}")
        notifications.append(Notification(giver=giver, contact=contact, text="\n".join(message_lines)))
    return notifications
