"""Roster checks shared by the schedule and bracket generators."""
from typing import List, Sequence

from errors import DuplicateParticipant, InsufficientParticipants, InvalidConfiguration

# Stored bracket documents use these strings as placeholders
BYE = "BYE"
GUEST = "GUEST"
RESERVED_NAMES = (BYE, GUEST)


def check_name(participant: str):
    if participant in RESERVED_NAMES:
        raise InvalidConfiguration(f"{participant!r} is reserved and cannot be used as a participant name")


def check_roster(participants: Sequence[str], minimum: int) -> List[str]:
    """Return the roster as a list, rejecting reserved names, duplicates and short rosters."""
    seen = set()
    for p in participants:
        check_name(p)
        if p in seen:
            raise DuplicateParticipant(p)
        seen.add(p)
    if len(seen) < minimum:
        raise InsufficientParticipants(minimum, len(seen))
    return list(participants)


def split_roster(text: str) -> List[str]:
    """One name per line; blank lines are skipped."""
    return [n.strip() for n in text.split("\n") if n.strip()]
