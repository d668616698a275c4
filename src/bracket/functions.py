import copy
import logging
import math
import random
from typing import List, Optional, Sequence

from errors import InvalidConfiguration, InvalidScore, MatchNotFound, NoTeamsConfigured
from bracket.models import (
    GUEST, AssignmentMode, Bracket, GameType, Match, Participant, Round, Team, TeamKind,
)
from roster import check_name, check_roster

logger = logging.getLogger(__name__)

MIN_PARTICIPANTS = {
    GameType.SINGLES: 2,
    GameType.DOUBLES: 4,
}

FIXED_LABELS = {
    1: "FINAL",
    2: "SEMI-FINAL",
    4: "QUARTER-FINAL",
}


def round_label(match_count: int, first: bool = False) -> str:
    if first:
        return "QUALIFIERS"
    return FIXED_LABELS.get(match_count, f"ROUND OF {match_count * 2}")


def pair_selections(selections: Sequence[Participant]) -> List[Team]:
    """Turn click order into doubles teams: every two selections form a pair.

    A trailing selection without a partner is paired with GUEST.
    """
    picked = check_roster(selections, 0)
    teams = []
    for i in range(0, len(picked), 2):
        if i + 1 < len(picked):
            teams.append(Team.pair(picked[i], picked[i + 1]))
        else:
            teams.append(Team.pair(picked[i], GUEST))
    return teams


def build_teams(
    participants: Sequence[Participant],
    game_type: GameType,
    assignment_mode: AssignmentMode,
    manual_teams: Optional[Sequence[Team]] = None,
    rng: Optional[random.Random] = None,
) -> List[Team]:
    roster = check_roster(participants, MIN_PARTICIPANTS[game_type])

    if assignment_mode is AssignmentMode.MANUAL:
        if not manual_teams:
            raise NoTeamsConfigured()
        for team in manual_teams:
            for i, member in enumerate(team.members):
                # GUEST may only fill the second seat of a pair
                if not (member == GUEST and i == 1 and team.kind is TeamKind.PAIR):
                    check_name(member)
        return list(manual_teams)

    rng = rng or random.Random()
    shuffled = list(roster)
    rng.shuffle(shuffled)

    if game_type is GameType.SINGLES:
        return [Team.single(p) for p in shuffled]
    return pair_selections(shuffled)


def generate_bracket(
    participants: Sequence[Participant],
    game_type: GameType,
    assignment_mode: AssignmentMode,
    manual_teams: Optional[Sequence[Team]] = None,
    rng: Optional[random.Random] = None,
) -> Bracket:
    """Build a single-elimination bracket padded with byes.

    Only the first round is seeded; later rounds hold empty matches until
    winners are filled in.
    """
    teams = build_teams(participants, game_type, assignment_mode, manual_teams, rng)

    team_count = len(teams)
    total_rounds = max(1, math.ceil(math.log2(team_count)))
    bracket_size = 2 ** total_rounds
    slots = teams + [Team.bye()] * (bracket_size - team_count)

    first = [Match(team1=slots[i], team2=slots[i + 1]) for i in range(0, bracket_size, 2)]
    rounds = [Round(label=round_label(len(first), first=True), matches=first)]

    match_count = len(first) // 2
    while match_count >= 1:
        rounds.append(Round(
            label=round_label(match_count),
            matches=[Match() for _ in range(match_count)],
        ))
        match_count //= 2

    logger.info(
        "Generated %s bracket: %d team(s), %d slot(s), %d round(s)",
        game_type.value, team_count, bracket_size, len(rounds),
    )
    return Bracket(rounds=rounds)


def set_score(
    bracket: Bracket,
    round_index: int,
    match_index: int,
    side: int,
    score: Optional[int],
) -> Bracket:
    """Return a copy of the bracket with one side's score set (None clears it)."""
    if side not in (1, 2):
        raise InvalidConfiguration(f"side must be 1 or 2, got {side}")
    if score is not None and score < 0:
        raise InvalidScore(f"Score cannot be negative: {score}")

    updated = copy.deepcopy(bracket)
    match = updated.match(round_index, match_index)
    if match is None:
        raise MatchNotFound(round_index, match_index)

    if side == 1:
        match.score1 = score
    else:
        match.score2 = score
    return updated


def advance_winners(bracket: Bracket, round_index: int) -> Bracket:
    """Return a copy with the winners of one round placed into the next.

    Winner of match i goes to match i // 2 of the next round, as team1 for
    even i and team2 for odd i. Undecided matches reset their slot to None.
    A slot that changes occupant has its match scores cleared.
    """
    if not 0 <= round_index < len(bracket.rounds) - 1:
        raise InvalidConfiguration(f"Round {round_index} has no following round to advance into")

    updated = copy.deepcopy(bracket)
    next_matches = updated.rounds[round_index + 1].matches
    for i, match in enumerate(updated.rounds[round_index].matches):
        winner = match.winner
        if winner is None:
            logger.warning(
                "Round %d match %d undecided (%s-%s), slot left open",
                round_index, i, match.score1, match.score2,
            )
        target = next_matches[i // 2]
        current = target.team1 if i % 2 == 0 else target.team2
        if current == winner:
            continue
        if i % 2 == 0:
            target.team1 = winner
        else:
            target.team2 = winner
        # Scores entered for the previous occupant no longer apply
        target.score1 = target.score2 = None
    return updated
