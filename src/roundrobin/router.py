import logging
import random
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Form, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from jinja2 import Environment, FileSystemLoader
from sqlalchemy.ext.asyncio import AsyncSession
from database import get_session, generate_id, ScheduleORM
from roundrobin.models import RoundAssignment
from roundrobin.functions import generate_schedule, sit_out_counts
from roster import split_roster

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/schedule', tags=['Round robin'])
# Plain-text exports, so no HTML escaping
templates = Jinja2Templates(env=Environment(
    loader=FileSystemLoader(Path(__file__).resolve().parent / "templates"),
    autoescape=False,
))


def _orm_to_schedule(row: ScheduleORM) -> list:
    return [RoundAssignment.from_dict(r) for r in row.rounds]


async def _get_schedule_orm(sid: str, session: AsyncSession) -> ScheduleORM:
    row = await session.get(ScheduleORM, sid)
    if not row:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return row


# Routes

@router.post("/create")
async def create_schedule(
    name: str = Form(...),
    courts: int = Form(...),
    num_rounds: int = Form(...),
    player_names: str = Form(...),
    seed: Optional[int] = Form(None),
    session: AsyncSession = Depends(get_session),
):
    names = split_roster(player_names)
    rng = random.Random(seed) if seed is not None else None
    rounds = generate_schedule(names, courts, num_rounds, rng=rng)

    sid = generate_id()
    session.add(ScheduleORM(
        id=sid, name=name, courts=courts, num_rounds=num_rounds,
        rounds=[r.to_dict() for r in rounds],
    ))
    await session.commit()
    logger.info("Created schedule %s (%s)", sid, name)

    return RedirectResponse(f"/schedule/{sid}", status_code=303)


@router.get("/{sid}")
async def schedule_view(sid: str, session: AsyncSession = Depends(get_session)):
    row = await _get_schedule_orm(sid, session)
    rounds = _orm_to_schedule(row)
    return {
        "id": row.id,
        "name": row.name,
        "courts": row.courts,
        "rounds": [r.to_dict() for r in rounds],
        "sit_outs": sit_out_counts(rounds),
    }


@router.get("/{sid}/text")
async def schedule_text(request: Request, sid: str, session: AsyncSession = Depends(get_session)):
    row = await _get_schedule_orm(sid, session)
    return templates.TemplateResponse(
        request,
        "schedule.txt",
        {"name": row.name, "rounds": _orm_to_schedule(row)},
        media_type="text/plain",
    )


@router.post("/{sid}/delete")
async def delete_schedule(sid: str, session: AsyncSession = Depends(get_session)):
    row = await session.get(ScheduleORM, sid)
    if row:
        await session.delete(row)
        await session.commit()
        logger.info("Deleted schedule %s", sid)
    return {"deleted": sid}
