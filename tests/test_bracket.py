import ast
import random
from pathlib import Path

import pytest

from errors import (
    InsufficientParticipants, InvalidConfiguration, InvalidScore, MatchNotFound, NoTeamsConfigured,
)
from bracket.functions import (
    advance_winners, build_teams, generate_bracket, pair_selections, round_label, set_score,
)
from bracket.models import (
    BYE, GUEST, AssignmentMode, Bracket, GameType, Match, Team, TeamKind,
)

NAMES = [f"player{i}" for i in range(1, 33)]


def _shape(bracket):
    return [(r.label, len(r.matches)) for r in bracket.rounds]


def _manual_singles(names):
    return generate_bracket(
        names, GameType.SINGLES, AssignmentMode.MANUAL,
        manual_teams=[Team.single(n) for n in names],
    )


def test_five_teams_pad_to_eight():
    bracket = generate_bracket(NAMES[:5], GameType.SINGLES, AssignmentMode.RANDOM, rng=random.Random(1))

    assert _shape(bracket) == [("QUALIFIERS", 4), ("SEMI-FINAL", 2), ("FINAL", 1)]
    slots = [t for m in bracket.rounds[0].matches for t in (m.team1, m.team2)]
    assert sum(t.is_bye for t in slots) == 3
    assert sorted(t.members[0] for t in slots if not t.is_bye) == sorted(NAMES[:5])
    for later in bracket.rounds[1:]:
        for match in later.matches:
            assert match.team1 is None and match.team2 is None
            assert match.score1 is None and match.score2 is None


def test_four_teams_need_no_byes():
    bracket = generate_bracket(NAMES[:8], GameType.DOUBLES, AssignmentMode.RANDOM, rng=random.Random(2))

    assert _shape(bracket) == [("QUALIFIERS", 2), ("FINAL", 1)]
    first = bracket.rounds[0].matches
    assert not any(m.is_bye for m in first)
    assert all(t.kind is TeamKind.PAIR for m in first for t in (m.team1, m.team2))


def test_sixteen_and_thirty_two_team_labels():
    sixteen = _manual_singles(NAMES[:16])
    thirty_two = _manual_singles(NAMES[:32])

    assert _shape(sixteen) == [
        ("QUALIFIERS", 8), ("QUARTER-FINAL", 4), ("SEMI-FINAL", 2), ("FINAL", 1),
    ]
    assert [label for label, _ in _shape(thirty_two)] == [
        "QUALIFIERS", "ROUND OF 16", "QUARTER-FINAL", "SEMI-FINAL", "FINAL",
    ]


def test_each_round_halves_the_previous():
    bracket = generate_bracket(NAMES[:11], GameType.SINGLES, AssignmentMode.RANDOM)
    counts = [len(r.matches) for r in bracket.rounds]

    assert counts[0] == 8
    for before, after in zip(counts, counts[1:]):
        assert after * 2 == before


def test_odd_doubles_roster_gets_one_guest():
    bracket = generate_bracket(NAMES[:7], GameType.DOUBLES, AssignmentMode.RANDOM, rng=random.Random(3))
    teams = [t for m in bracket.rounds[0].matches for t in (m.team1, m.team2)]

    assert len(teams) == 4
    guests = [t for t in teams if t.has_guest]
    assert len(guests) == 1
    assert GUEST in guests[0].members
    for team in teams:
        if not team.has_guest:
            assert len(team.members) == 2
            assert GUEST not in team.members and BYE not in team.members
    real = [m for t in teams for m in t.members if m != GUEST]
    assert sorted(real) == sorted(NAMES[:7])


def test_shape_repeats_across_calls():
    shapes = {
        tuple(_shape(generate_bracket(NAMES[:6], GameType.DOUBLES, AssignmentMode.RANDOM)))
        for _ in range(5)
    }
    assert shapes == {(("QUALIFIERS", 2), ("FINAL", 1))}


def test_manual_teams_used_verbatim():
    teams = [Team.pair("a", "b"), Team.pair("c", "d"), Team.pair("e", GUEST)]
    bracket = generate_bracket(list("abcde"), GameType.DOUBLES, AssignmentMode.MANUAL, manual_teams=teams)

    first = bracket.rounds[0].matches
    assert [first[0].team1, first[0].team2, first[1].team1] == teams
    assert first[1].team2.is_bye


def test_single_manual_team_still_gets_a_match():
    bracket = generate_bracket(
        list("abcd"), GameType.DOUBLES, AssignmentMode.MANUAL, manual_teams=[Team.pair("a", "b")],
    )
    assert _shape(bracket) == [("QUALIFIERS", 1)]
    assert bracket.rounds[0].matches[0].team2.is_bye


def test_manual_mode_without_teams():
    with pytest.raises(NoTeamsConfigured):
        generate_bracket(NAMES[:4], GameType.DOUBLES, AssignmentMode.MANUAL, manual_teams=[])


@pytest.mark.parametrize("game_type,count", [(GameType.SINGLES, 1), (GameType.DOUBLES, 3)])
def test_roster_minimum(game_type, count):
    with pytest.raises(InsufficientParticipants):
        generate_bracket(NAMES[:count], game_type, AssignmentMode.RANDOM)


def test_random_singles_teams_are_single_players():
    teams = build_teams(NAMES[:3], GameType.SINGLES, AssignmentMode.RANDOM, rng=random.Random(5))
    assert all(t.kind is TeamKind.SINGLE for t in teams)
    assert sorted(t.members[0] for t in teams) == sorted(NAMES[:3])


def test_pair_selections_in_click_order():
    assert pair_selections(["a", "b", "c"]) == [Team.pair("a", "b"), Team.pair("c", GUEST)]


@pytest.mark.parametrize("count,label", [(1, "FINAL"), (2, "SEMI-FINAL"), (4, "QUARTER-FINAL"), (8, "ROUND OF 16")])
def test_round_label(count, label):
    assert round_label(count) == label
    assert round_label(count, first=True) == "QUALIFIERS"


def test_team_stored_shapes():
    assert Team.single("a").to_data() == "a"
    assert Team.pair("a", "b").to_data() == ["a", "b"]
    assert Team.bye().to_data() == BYE
    assert Team.from_data(["a", GUEST]).has_guest
    assert Team.from_data(BYE).is_bye
    assert Team.from_data(GUEST).kind is TeamKind.GUEST


def test_bracket_document_is_json_shaped():
    bracket = _manual_singles(list("abc"))
    data = bracket.to_dict()

    assert data["rounds"][0] == {
        "label": "QUALIFIERS",
        "matches": [
            {"team1": "a", "team2": "b", "score1": None, "score2": None},
            {"team1": "c", "team2": "BYE", "score1": None, "score2": None},
        ],
    }
    assert Bracket.from_dict(data) == bracket


# -- Results -------------------------------------------------------------------

def test_set_score_leaves_original_untouched():
    bracket = _manual_singles(list("abcd"))
    updated = set_score(bracket, 0, 1, 2, 21)

    assert updated.rounds[0].matches[1].score2 == 21
    assert bracket.rounds[0].matches[1].score2 is None


def test_set_score_rejects_bad_input():
    bracket = _manual_singles(list("abcd"))

    with pytest.raises(MatchNotFound):
        set_score(bracket, 0, 5, 1, 10)
    with pytest.raises(MatchNotFound):
        set_score(bracket, 3, 0, 1, 10)
    with pytest.raises(InvalidConfiguration):
        set_score(bracket, 0, 0, 3, 10)
    with pytest.raises(InvalidScore):
        set_score(bracket, 0, 0, 1, -1)


def test_advance_winners_by_score():
    bracket = _manual_singles(list("abcd"))
    for round_index, match_index, side, score in [(0, 0, 1, 21), (0, 0, 2, 15), (0, 1, 1, 10), (0, 1, 2, 21)]:
        bracket = set_score(bracket, round_index, match_index, side, score)

    final = advance_winners(bracket, 0).rounds[1].matches[0]

    assert final.team1 == Team.single("a")
    assert final.team2 == Team.single("d")


def test_bye_advances_without_score():
    bracket = _manual_singles(list("abc"))
    final = advance_winners(bracket, 0).rounds[1].matches[0]

    assert final.team1 is None
    assert final.team2 == Team.single("c")


def test_tie_leaves_slot_open():
    bracket = _manual_singles(list("abcd"))
    bracket = set_score(bracket, 0, 0, 1, 11)
    bracket = set_score(bracket, 0, 0, 2, 11)

    assert bracket.rounds[0].matches[0].winner is None
    assert advance_winners(bracket, 0).rounds[1].matches[0].team1 is None


def test_final_round_cannot_advance():
    bracket = _manual_singles(list("abcd"))
    with pytest.raises(InvalidConfiguration):
        advance_winners(bracket, 1)


def test_match_winner_needs_both_teams():
    assert Match(team1=Team.single("a")).winner is None


def _score_first_round(bracket, results):
    for match_index, (score1, score2) in enumerate(results):
        bracket = set_score(bracket, 0, match_index, 1, score1)
        bracket = set_score(bracket, 0, match_index, 2, score2)
    return bracket


def test_readvance_clears_scores_of_replaced_team():
    bracket = _score_first_round(_manual_singles(list("abcd")), [(21, 15), (10, 21)])
    bracket = advance_winners(bracket, 0)
    bracket = set_score(bracket, 1, 0, 1, 21)
    bracket = set_score(bracket, 1, 0, 2, 19)

    corrected = _score_first_round(bracket, [(15, 21), (10, 21)])
    final = advance_winners(corrected, 0).rounds[1].matches[0]

    assert final.team1 == Team.single("b")
    assert final.team2 == Team.single("d")
    assert final.score1 is None and final.score2 is None


def test_readvance_keeps_scores_when_nothing_changed():
    bracket = _score_first_round(_manual_singles(list("abcd")), [(21, 15), (10, 21)])
    bracket = advance_winners(bracket, 0)
    bracket = set_score(bracket, 1, 0, 1, 21)

    final = advance_winners(bracket, 0).rounds[1].matches[0]

    assert final.team1 == Team.single("a")
    assert final.score1 == 21


# -- Reserved names ------------------------------------------------------------

@pytest.mark.parametrize("name", [BYE, GUEST])
@pytest.mark.parametrize("game_type", [GameType.SINGLES, GameType.DOUBLES])
def test_sentinel_names_rejected_in_roster(name, game_type):
    with pytest.raises(InvalidConfiguration):
        generate_bracket([name, "a", "b", "c"], game_type, AssignmentMode.RANDOM, rng=random.Random(0))


@pytest.mark.parametrize("team", [
    Team.single(BYE),
    Team.single(GUEST),
    Team.pair(BYE, "amy"),
    Team.pair(GUEST, "amy"),
])
def test_sentinel_names_rejected_in_manual_teams(team):
    with pytest.raises(InvalidConfiguration):
        generate_bracket(
            ["amy", "bob"], GameType.SINGLES, AssignmentMode.MANUAL,
            manual_teams=[team, Team.single("bob")],
        )


def test_even_doubles_roster_has_no_guest():
    bracket = generate_bracket(list("abcd"), GameType.DOUBLES, AssignmentMode.RANDOM, rng=random.Random(0))
    teams = [t for m in bracket.rounds[0].matches for t in (m.team1, m.team2)]

    assert not any(t.has_guest for t in teams)


@pytest.mark.parametrize("data", [[], ["a", "b", "c"]])
def test_stored_team_needs_one_or_two_members(data):
    with pytest.raises(InvalidConfiguration):
        Team.from_data(data)


def test_bracket_package_does_not_use_round_robin():
    package = Path(__file__).resolve().parent.parent / "src" / "bracket"
    imported = set()
    for source in package.glob("*.py"):
        for node in ast.walk(ast.parse(source.read_text())):
            if isinstance(node, ast.ImportFrom) and node.module:
                imported.add(node.module.split(".")[0])
            elif isinstance(node, ast.Import):
                imported.update(alias.name.split(".")[0] for alias in node.names)

    assert "roundrobin" not in imported
