import logging
import random
from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

from errors import InvalidConfiguration
from roster import check_roster
from roundrobin.models import CourtMatch, PairHistory, Participant, RoundAssignment

logger = logging.getLogger(__name__)

PLAYERS_PER_COURT = 4
# Reshuffles tried per round before accepting a partner repeat
MAX_ATTEMPTS = 100
REPEAT_PARTNER_PENALTY = 100
REPEAT_OPPONENT_PENALTY = 1

Team = Tuple[Participant, Participant]


def court_label(index: int) -> str:
    """0 -> 'A', 25 -> 'Z', 26 -> 'AA'."""
    label = ""
    n = index + 1
    while n:
        n, rem = divmod(n - 1, 26)
        label = chr(ord("A") + rem) + label
    return label


def partnering_options(group: Sequence[Participant]) -> List[Tuple[Team, Team]]:
    p0, p1, p2, p3 = group
    return [
        ((p0, p1), (p2, p3)),
        ((p0, p2), (p1, p3)),
        ((p0, p3), (p1, p2)),
    ]


def score_partnering(team_a: Team, team_b: Team, history: PairHistory) -> int:
    score = 0
    if history.have_partnered(*team_a) or history.have_partnered(*team_b):
        score += REPEAT_PARTNER_PENALTY
    for a in team_a:
        for b in team_b:
            if history.have_faced(a, b):
                score += REPEAT_OPPONENT_PENALTY
    return score


def best_partnering(group: Sequence[Participant], history: PairHistory) -> Tuple[Team, Team, int]:
    """Pick the cheapest of the three splits; ties go to the first listed."""
    scored = [
        (team_a, team_b, score_partnering(team_a, team_b, history))
        for team_a, team_b in partnering_options(group)
    ]
    return min(scored, key=lambda option: option[2])


def generate_round(
    participants: Sequence[Participant],
    courts: int,
    history: PairHistory,
    rng: random.Random,
    round_number: int = 1,
) -> RoundAssignment:
    """Assign one round of doubles courts against the given history.

    Reshuffles up to MAX_ATTEMPTS times while some court can only be filled
    by repeating a partnership. When the budget runs out the last attempt is
    accepted as is.
    """
    need = courts * PLAYERS_PER_COURT

    for attempt in range(1, MAX_ATTEMPTS + 1):
        shuffled = list(participants)
        rng.shuffle(shuffled)
        playing, waiting = shuffled[:need], shuffled[need:]

        filled = len(playing) // PLAYERS_PER_COURT
        matches = []
        worst = 0
        for c in range(filled):
            group = playing[c * PLAYERS_PER_COURT:(c + 1) * PLAYERS_PER_COURT]
            team_a, team_b, score = best_partnering(group, history)
            worst = max(worst, score)
            matches.append(CourtMatch(court=court_label(c), team_a=list(team_a), team_b=list(team_b)))

        if worst < REPEAT_PARTNER_PENALTY:
            logger.debug("Round %d accepted after %d attempt(s), score %d", round_number, attempt, worst)
            break
    else:
        logger.warning(
            "Round %d: no repeat-free partnering in %d attempts, accepting score %d",
            round_number, MAX_ATTEMPTS, worst,
        )

    # Players beyond the last full court sit out with the rest
    waiting = playing[filled * PLAYERS_PER_COURT:] + waiting
    return RoundAssignment(round=round_number, matches=matches, waiting=waiting)


def generate_schedule(
    participants: Sequence[Participant],
    courts: int,
    num_rounds: int,
    rng: Optional[random.Random] = None,
) -> List[RoundAssignment]:
    """Generate doubles rounds that rotate partners and opponents."""
    roster = check_roster(participants, PLAYERS_PER_COURT)
    if courts < 1:
        raise InvalidConfiguration(f"courts must be at least 1, got {courts}")
    if num_rounds < 1:
        raise InvalidConfiguration(f"num_rounds must be at least 1, got {num_rounds}")
    rng = rng or random.Random()

    schedule = []
    history = PairHistory()
    for round_number in range(1, num_rounds + 1):
        assignment = generate_round(roster, courts, history, rng, round_number)
        history = history.record(assignment)
        schedule.append(assignment)

    logger.info(
        "Generated %d round(s) for %d participants on %d court(s)",
        num_rounds, len(roster), courts,
    )
    return schedule


def schedule_history(schedule: Sequence[RoundAssignment]) -> PairHistory:
    history = PairHistory()
    for assignment in schedule:
        history = history.record(assignment)
    return history


def sit_out_counts(schedule: Sequence[RoundAssignment]) -> Dict[Participant, int]:
    """Number of rounds each participant spent waiting."""
    counts: Counter = Counter()
    for assignment in schedule:
        for p in assignment.playing:
            counts[p] += 0
        counts.update(assignment.waiting)
    return dict(counts)
