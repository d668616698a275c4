from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from errors import InvalidConfiguration
from roster import BYE, GUEST

Participant = str


class GameType(str, Enum):
    SINGLES = "singles"
    DOUBLES = "doubles"


class AssignmentMode(str, Enum):
    RANDOM = "random"
    MANUAL = "manual"


class TeamKind(str, Enum):
    SINGLE = "single"
    PAIR = "pair"
    BYE = "bye"
    GUEST = "guest"


@dataclass(frozen=True)
class Team:
    kind: TeamKind
    members: Tuple[Participant, ...] = ()

    @classmethod
    def single(cls, participant: Participant) -> "Team":
        return cls(TeamKind.SINGLE, (participant,))

    @classmethod
    def pair(cls, first: Participant, second: Participant) -> "Team":
        return cls(TeamKind.PAIR, (first, second))

    @classmethod
    def bye(cls) -> "Team":
        return cls(TeamKind.BYE)

    @classmethod
    def guest(cls) -> "Team":
        return cls(TeamKind.GUEST)

    @property
    def is_bye(self) -> bool:
        return self.kind is TeamKind.BYE

    @property
    def has_guest(self) -> bool:
        return self.kind is TeamKind.GUEST or GUEST in self.members

    @property
    def display_name(self) -> str:
        if self.kind is TeamKind.BYE:
            return BYE
        if self.kind is TeamKind.GUEST:
            return GUEST
        return "·".join(self.members)

    def to_data(self) -> Union[str, List[str]]:
        """Stored shape: a name, a list of two names, or a sentinel string."""
        if self.kind is TeamKind.PAIR:
            return list(self.members)
        if self.kind is TeamKind.SINGLE:
            return self.members[0]
        return self.display_name

    @classmethod
    def from_data(cls, data: Union[str, List[str]]) -> "Team":
        if isinstance(data, (list, tuple)):
            if len(data) == 1:
                return cls.single(data[0])
            if len(data) != 2:
                raise InvalidConfiguration(f"A team has one or two members, got {len(data)}")
            return cls.pair(data[0], data[1])
        if data == BYE:
            return cls.bye()
        if data == GUEST:
            return cls.guest()
        return cls.single(data)


@dataclass
class Match:
    team1: Optional[Team] = None
    team2: Optional[Team] = None
    score1: Optional[int] = None
    score2: Optional[int] = None

    @property
    def is_bye(self) -> bool:
        return any(t is not None and t.is_bye for t in (self.team1, self.team2))

    @property
    def winner(self) -> Optional[Team]:
        """Winning team, or None while undecided.

        A team drawn against BYE goes through without a score. A tie or a
        missing score leaves the match undecided.
        """
        if self.team1 is None or self.team2 is None:
            return None
        if self.team2.is_bye:
            return self.team1
        if self.team1.is_bye:
            return self.team2
        if self.score1 is None or self.score2 is None or self.score1 == self.score2:
            return None
        return self.team1 if self.score1 > self.score2 else self.team2

    def to_dict(self) -> dict:
        return {
            "team1": self.team1.to_data() if self.team1 else None,
            "team2": self.team2.to_data() if self.team2 else None,
            "score1": self.score1,
            "score2": self.score2,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Match":
        team1, team2 = data.get("team1"), data.get("team2")
        return cls(
            team1=Team.from_data(team1) if team1 is not None else None,
            team2=Team.from_data(team2) if team2 is not None else None,
            score1=data.get("score1"),
            score2=data.get("score2"),
        )


@dataclass
class Round:
    label: str
    matches: List[Match] = field(default_factory=list)


@dataclass
class Bracket:
    rounds: List[Round] = field(default_factory=list)

    def match(self, round_index: int, match_index: int) -> Optional[Match]:
        if not 0 <= round_index < len(self.rounds):
            return None
        matches = self.rounds[round_index].matches
        if not 0 <= match_index < len(matches):
            return None
        return matches[match_index]

    def to_dict(self) -> dict:
        return {
            "rounds": [
                {"label": r.label, "matches": [m.to_dict() for m in r.matches]}
                for r in self.rounds
            ]
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Bracket":
        return cls(rounds=[
            Round(label=r["label"], matches=[Match.from_dict(m) for m in r["matches"]])
            for r in data.get("rounds", [])
        ])
