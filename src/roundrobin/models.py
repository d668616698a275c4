from dataclasses import dataclass, field, asdict
from typing import Dict, FrozenSet, Iterable, List

Participant = str


@dataclass
class CourtMatch:
    court: str
    team_a: List[Participant]
    team_b: List[Participant]

    @property
    def players(self) -> List[Participant]:
        return [*self.team_a, *self.team_b]


@dataclass
class RoundAssignment:
    round: int
    matches: List[CourtMatch] = field(default_factory=list)
    waiting: List[Participant] = field(default_factory=list)

    @property
    def playing(self) -> List[Participant]:
        return [p for m in self.matches for p in m.players]

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "RoundAssignment":
        return cls(
            round=data["round"],
            matches=[
                CourtMatch(court=m["court"], team_a=list(m["team_a"]), team_b=list(m["team_b"]))
                for m in data.get("matches", [])
            ],
            waiting=list(data.get("waiting", [])),
        )


def _link(table: Dict[Participant, FrozenSet[Participant]], a: Participant, b: Participant):
    table[a] = table.get(a, frozenset()) | {b}
    table[b] = table.get(b, frozenset()) | {a}


@dataclass(frozen=True)
class PairHistory:
    """Who has partnered and who has faced whom so far in one generation run.

    The value is never mutated: ``record`` returns a new history, so each
    round can be generated against an explicit snapshot.
    """

    partners: Dict[Participant, FrozenSet[Participant]] = field(default_factory=dict)
    opponents: Dict[Participant, FrozenSet[Participant]] = field(default_factory=dict)

    def have_partnered(self, a: Participant, b: Participant) -> bool:
        return b in self.partners.get(a, frozenset())

    def have_faced(self, a: Participant, b: Participant) -> bool:
        return b in self.opponents.get(a, frozenset())

    def partners_of(self, p: Participant) -> FrozenSet[Participant]:
        return self.partners.get(p, frozenset())

    def opponents_of(self, p: Participant) -> FrozenSet[Participant]:
        return self.opponents.get(p, frozenset())

    def record_matches(self, matches: Iterable[CourtMatch]) -> "PairHistory":
        partners = dict(self.partners)
        opponents = dict(self.opponents)
        for m in matches:
            _link(partners, *m.team_a)
            _link(partners, *m.team_b)
            for a in m.team_a:
                for b in m.team_b:
                    _link(opponents, a, b)
        return PairHistory(partners=partners, opponents=opponents)

    def record(self, assignment: RoundAssignment) -> "PairHistory":
        return self.record_matches(assignment.matches)
