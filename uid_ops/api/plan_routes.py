"""Weekly plan and bin manifest routes.

Week keys in paths and in ``weekStart``/``ws`` query params are normalized to
the Monday of their week before lookup.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Query, Request
from fastapi.responses import JSONResponse

from uid_ops.db.repositories.plan_repo import BinStore, PlanStore
from uid_ops.errors import ValidationError

router = APIRouter(tags=["plan"])


def _plans(request: Request) -> PlanStore:
    return request.app.state.plan_store


def _bins(request: Request) -> BinStore:
    return request.app.state.bin_store


def _week_param(week_start: Optional[str], ws: Optional[str]) -> str:
    value = (week_start or ws or "").strip()
    if not value:
        raise ValidationError("weekStart required", fields=["weekStart"])
    return value


# --- plans ---


@router.get("/plan")
async def get_plan_by_query(
    request: Request,
    week_start: Optional[str] = Query(None, alias="weekStart"),
    ws: Optional[str] = Query(None),
) -> list[dict[str, Any]]:
    return _plans(request).get_week(_week_param(week_start, ws))


@router.get("/plan/weeks")
async def list_plan_weeks(request: Request) -> list[dict[str, Any]]:
    """Recently written weeks, newest week first."""
    return _plans(request).list_recent_weeks()


@router.get("/plan/weeks/{monday}")
async def get_plan_week(monday: str, request: Request) -> list[dict[str, Any]]:
    return _plans(request).get_week(monday)


@router.put("/plan/weeks/{monday}")
async def put_plan_week(monday: str, request: Request, lines: Any = Body(None)) -> list[dict[str, Any]]:
    """Replace the week's whole plan; invalid lines are dropped."""
    return _plans(request).put_week(monday, lines)


@router.post("/plan/weeks/{monday}/zero")
async def zero_plan_week(monday: str, request: Request) -> dict[str, Any]:
    week_start = _plans(request).zero_week(monday)
    return {"ok": True, "week_start": week_start, "rows": 0}


# --- bins ---


@router.get("/bins")
async def get_bins_by_query(
    request: Request,
    week_start: Optional[str] = Query(None, alias="weekStart"),
    ws: Optional[str] = Query(None),
) -> list[dict[str, Any]]:
    return _bins(request).get_week(_week_param(week_start, ws))


@router.get("/bins/weeks/{week_start}")
async def get_bins_week(week_start: str, request: Request) -> list[dict[str, Any]]:
    return _bins(request).get_week(week_start)


@router.put("/bins/weeks/{week_start}", response_model=None)
async def put_bins_week(
    week_start: str,
    request: Request,
    rows: Any = Body(None),
) -> dict[str, Any] | JSONResponse:
    """Upsert bin rows for the week; per-row rejections are reported alongside."""
    try:
        result = _bins(request).put_week(week_start, rows)
    except ValidationError as e:
        if isinstance(e.details, list):
            return JSONResponse(status_code=400, content={"ok": False, "errors": e.details})
        raise
    return {"ok": True, **result}
