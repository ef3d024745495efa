"""
Session API - FastAPI router for the live quote session.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel

from ..exceptions import UnknownFieldError, ExportError, NoResultError
from ..export.quote_summary import session_summary, summary_text, export_csv
from ..services.quote_session import QuoteSession
from .state import get_session

router = APIRouter(prefix="/session", tags=["session"])


# Pydantic models for API
class FieldUpdate(BaseModel):
    """Request model for setting one input field."""
    name: str
    value: Any


class RatesUpdate(BaseModel):
    """Request model for updating pricing rates (only provided fields change)."""
    regular_pay_rate: Optional[float] = None
    supervisor_pay_rate: Optional[float] = None
    transport_cost_per_day: Optional[float] = None
    outside_houston_transport_cost_per_day: Optional[float] = None
    large_hood_price: Optional[float] = None
    small_hood_price: Optional[float] = None
    work_comp_rate: Optional[float] = None
    gl_rate: Optional[float] = None


class SplitCreate(BaseModel):
    """Request model for adding a commission split."""
    name: Optional[str] = None
    percentage: float = 0


class SplitUpdate(BaseModel):
    """Request model for changing a commission split percentage."""
    percentage: float


class SessionResponse(BaseModel):
    """Response model for the session state after any change."""
    params: dict
    options: dict
    config: dict
    result: Optional[dict]
    warnings: list[str]
    can_undo: bool
    can_redo: bool
    history_size: int


def session_state(session: QuoteSession) -> SessionResponse:
    """Serialize the live session, draining its pending warnings."""
    return SessionResponse(
        params=jsonable_encoder(session.params),
        options=jsonable_encoder(session.options),
        config=jsonable_encoder(session.config),
        result=session.result.to_dict() if session.result else None,
        warnings=session.pop_warnings(),
        can_undo=session.history.can_undo,
        can_redo=session.history.can_redo,
        history_size=len(session.history),
    )


# Endpoints

@router.get("", response_model=SessionResponse)
async def get_state(session: QuoteSession = Depends(get_session)):
    """Current inputs, rates and result."""
    return session_state(session)


@router.post("/field", response_model=SessionResponse)
async def set_field(update: FieldUpdate, session: QuoteSession = Depends(get_session)):
    """Set a single job parameter or option and recompute."""
    try:
        session.set_field(update.name, update.value)
    except UnknownFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session_state(session)


@router.put("/config", response_model=SessionResponse)
async def update_config(rates: RatesUpdate, session: QuoteSession = Depends(get_session)):
    """Update pricing rates. Not undoable."""
    session.update_pricing_config(**rates.model_dump(exclude_none=True))
    return session_state(session)


@router.post("/undo", response_model=SessionResponse)
async def undo(session: QuoteSession = Depends(get_session)):
    session.undo()
    return session_state(session)


@router.post("/redo", response_model=SessionResponse)
async def redo(session: QuoteSession = Depends(get_session)):
    session.redo()
    return session_state(session)


@router.post("/reset", response_model=SessionResponse)
async def reset(session: QuoteSession = Depends(get_session)):
    """Restore default inputs and clear history."""
    session.reset()
    return session_state(session)


@router.post("/commission-splits", response_model=SessionResponse)
async def add_split(split: SplitCreate, session: QuoteSession = Depends(get_session)):
    session.add_commission_split(split.name, split.percentage)
    return session_state(session)


@router.put("/commission-splits/{index}", response_model=SessionResponse)
async def update_split(index: int, split: SplitUpdate, session: QuoteSession = Depends(get_session)):
    if not 0 <= index < len(session.options.commission_splits):
        raise HTTPException(status_code=404, detail=f"Commission split {index} not found")
    session.set_commission_split(index, split.percentage)
    return session_state(session)


@router.delete("/commission-splits/{index}", response_model=SessionResponse)
async def delete_split(index: int, session: QuoteSession = Depends(get_session)):
    if not 0 <= index < len(session.options.commission_splits):
        raise HTTPException(status_code=404, detail=f"Commission split {index} not found")
    session.remove_commission_split(index)
    return session_state(session)


def current_summary(session: QuoteSession) -> dict:
    try:
        return session_summary(session)
    except NoResultError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/summary")
async def get_summary(session: QuoteSession = Depends(get_session)):
    """Structured quote summary for print/PDF renderers."""
    return current_summary(session)


@router.get("/summary.txt", response_class=PlainTextResponse)
async def get_summary_text(session: QuoteSession = Depends(get_session)):
    return summary_text(current_summary(session))


@router.get("/export.csv")
async def get_export_csv(session: QuoteSession = Depends(get_session)):
    summary = current_summary(session)
    try:
        text = export_csv(summary)
    except ExportError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(
        content=text,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=kitchen_quote.csv"},
    )
