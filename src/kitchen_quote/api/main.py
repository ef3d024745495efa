from typing import Any, Dict, Optional
import logging
import sys
from pathlib import Path

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

# Add src to path for internal imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from kitchen_quote import __version__
from kitchen_quote.config.settings import configure_logging
from kitchen_quote.exceptions import UnknownFieldError
from kitchen_quote.services.quote_session import QuoteSession
from kitchen_quote.services.preferences import PreferencesStore
from kitchen_quote.api.session_api import router as session_router
from kitchen_quote.api.state import get_preferences_store

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Kitchen Quote API",
    description="Backend API for the Kitchen Cleaning Quote Calculator",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include live session API
app.include_router(session_router)


class ComputeRequest(BaseModel):
    params: Dict[str, Any] = {}
    options: Dict[str, Any] = {}
    config: Dict[str, float] = {}


class ComputeResponse(BaseModel):
    result: dict
    warnings: list[str]


class PreferencesUpdate(BaseModel):
    dark_mode: Optional[bool] = None


@app.get("/")
async def root():
    return {"status": "online", "message": "Kitchen Quote API Active"}


@app.post("/compute", response_model=ComputeResponse)
async def compute_quote(req: ComputeRequest):
    """One-off quote from a full set of inputs; no session state is touched."""
    try:
        session = QuoteSession()
        if req.config:
            session.update_pricing_config(**req.config)
        session.update(**req.params, **req.options)
    except UnknownFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TypeError as e:
        # Same field given in both params and options
        raise HTTPException(status_code=400, detail=str(e))

    if session.result is None:
        raise HTTPException(status_code=500, detail="; ".join(session.warnings) or "Calculation failed")
    return ComputeResponse(result=session.result.to_dict(), warnings=session.pop_warnings())


@app.get("/preferences")
async def get_preferences(store: PreferencesStore = Depends(get_preferences_store)):
    return {"preferences": store.preferences.__dict__}


@app.put("/preferences")
async def update_preferences(update: PreferencesUpdate,
                             store: PreferencesStore = Depends(get_preferences_store)):
    try:
        prefs = store.update(**update.model_dump(exclude_none=True))
    except OSError as e:
        logger.warning("Saving preferences failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"preferences": prefs.__dict__}
