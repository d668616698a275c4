import logging
import random
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Form, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from jinja2 import Environment, FileSystemLoader
from sqlalchemy.ext.asyncio import AsyncSession
from database import get_session, generate_id, BracketORM
from roster import split_roster
from bracket.models import GUEST, AssignmentMode, Bracket, GameType, Team
from bracket.functions import advance_winners, generate_bracket, set_score

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/bracket', tags=['Bracket'])
# Plain-text exports, so no HTML escaping
templates = Jinja2Templates(env=Environment(
    loader=FileSystemLoader(Path(__file__).resolve().parent / "templates"),
    autoescape=False,
))

# -- Helpers -------------------------------------------------------------------

def _parse_choice(enum_cls, value: str):
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        choices = ", ".join(e.value for e in enum_cls)
        raise HTTPException(status_code=400, detail=f"Expected one of: {choices}")


def parse_team_lines(text: str, game_type: GameType) -> List[Team]:
    """One team per line, members separated by commas."""
    teams = []
    for line in split_roster(text):
        members = [m.strip() for m in line.split(",") if m.strip()]
        if game_type is GameType.SINGLES and len(members) == 1:
            teams.append(Team.single(members[0]))
        elif game_type is GameType.DOUBLES and len(members) == 1:
            teams.append(Team.pair(members[0], GUEST))
        elif game_type is GameType.DOUBLES and len(members) == 2:
            teams.append(Team.pair(*members))
        else:
            raise HTTPException(status_code=400, detail=f"Invalid team line: {line!r}")
    return teams


def _team_members(teams: List[Team]) -> List[str]:
    return [m for t in teams for m in t.members if m != GUEST]


async def _get_bracket_orm(bid: str, session: AsyncSession) -> BracketORM:
    row = await session.get(BracketORM, bid)
    if not row:
        raise HTTPException(status_code=404, detail="Bracket not found")
    return row


def _bracket_response(row: BracketORM) -> dict:
    return {
        "id": row.id,
        "name": row.name,
        "game_type": row.game_type,
        "assignment_mode": row.assignment_mode,
        **row.bracket_data,
    }

# -- Routes --------------------------------------------------------------------

@router.post("/create")
async def create_bracket(
    name: str = Form(...),
    game_type: str = Form("doubles"),
    assignment_mode: str = Form("random"),
    player_names: str = Form(""),
    team_lines: str = Form(""),
    seed: Optional[int] = Form(None),
    session: AsyncSession = Depends(get_session),
):
    gtype = _parse_choice(GameType, game_type)
    mode = _parse_choice(AssignmentMode, assignment_mode)

    manual_teams = parse_team_lines(team_lines, gtype) if mode is AssignmentMode.MANUAL else None
    names = split_roster(player_names)
    if not names and manual_teams:
        names = _team_members(manual_teams)

    rng = random.Random(seed) if seed is not None else None
    bracket = generate_bracket(names, gtype, mode, manual_teams, rng=rng)

    bid = generate_id()
    session.add(BracketORM(
        id=bid, name=name, game_type=gtype.value, assignment_mode=mode.value,
        bracket_data=bracket.to_dict(),
    ))
    await session.commit()
    logger.info("Created bracket %s (%s)", bid, name)

    return RedirectResponse(f"/bracket/{bid}", status_code=303)


@router.get("/{bid}")
async def bracket_view(bid: str, session: AsyncSession = Depends(get_session)):
    row = await _get_bracket_orm(bid, session)
    return _bracket_response(row)


@router.get("/{bid}/text")
async def bracket_text(request: Request, bid: str, session: AsyncSession = Depends(get_session)):
    row = await _get_bracket_orm(bid, session)
    return templates.TemplateResponse(
        request,
        "bracket.txt",
        {"name": row.name, "bracket": Bracket.from_dict(row.bracket_data)},
        media_type="text/plain",
    )


@router.post("/{bid}/score")
async def submit_score(
    bid: str,
    round_index: int = Form(...),
    match_index: int = Form(...),
    side: int = Form(...),
    score: Optional[int] = Form(None),
    session: AsyncSession = Depends(get_session),
):
    row = await _get_bracket_orm(bid, session)
    bracket = set_score(Bracket.from_dict(row.bracket_data), round_index, match_index, side, score)
    row.bracket_data = bracket.to_dict()
    await session.commit()
    logger.info("Bracket %s: round %d match %d side %d -> %s", bid, round_index, match_index, side, score)

    return RedirectResponse(f"/bracket/{bid}", status_code=303)


@router.post("/{bid}/advance")
async def advance_round(
    bid: str,
    round_index: int = Form(...),
    session: AsyncSession = Depends(get_session),
):
    row = await _get_bracket_orm(bid, session)
    bracket = advance_winners(Bracket.from_dict(row.bracket_data), round_index)
    row.bracket_data = bracket.to_dict()
    await session.commit()
    logger.info("Bracket %s: advanced winners of round %d", bid, round_index)

    return RedirectResponse(f"/bracket/{bid}", status_code=303)


@router.post("/{bid}/delete")
async def delete_bracket(bid: str, session: AsyncSession = Depends(get_session)):
    row = await session.get(BracketORM, bid)
    if row:
        await session.delete(row)
        await session.commit()
        logger.info("Deleted bracket %s", bid)
    return {"deleted": bid}
