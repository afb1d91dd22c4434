"""FastAPI server for spellol daily rotation."""

import asyncio
import logging
import os
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from core.config import DIFFICULTIES, ENV_LOG_LEVEL
from core.errors import StoreError
from core.rotation import RotationJob, SUCCESS
from core.schedule import load_schedule
from server.storage import create_storage

logging.basicConfig(level=os.environ.get(ENV_LOG_LEVEL, 'INFO'))
logger = logging.getLogger(__name__)


# Pydantic models for API
class RotateResponse(BaseModel):
    status: str


class ActiveWord(BaseModel):
    id: int
    word: str
    narration_asset: Optional[str]
    syllable_count: int
    difficulty: str
    created_at: str


class DailyResponse(BaseModel):
    total: int
    words: list[ActiveWord]


# Global state (in production, use proper DI)
storage = None
schedule = None

app = FastAPI(title="Spellol Daily API", description="Daily spelling word rotation")


@app.on_event("startup")
async def startup():
    """Initialize storage and load the rotation schedule on startup."""
    global storage, schedule
    storage = create_storage()
    schedule = load_schedule()
    logger.info(f"Rotation schedule: {', '.join(r.label for r in schedule)}")


def run_rotation() -> None:
    """Run one rotation synchronously against the global storage."""
    job = RotationJob(storage, storage, schedule=schedule)
    report = job.run()
    logger.info(f"Rotation inserted {len(report.inserted)} words")


@app.get("/")
async def root():
    """Health check."""
    return {"service": "spellol-daily", "status": "ok"}


@app.post("/api/rotate", response_model=RotateResponse)
async def rotate():
    """Trigger a rotation. Always reports success; shortfalls are only logged."""
    loop = asyncio.get_event_loop()
    await loop.run_in_executor(None, run_rotation)
    return RotateResponse(status=SUCCESS)


@app.get("/api/daily", response_model=DailyResponse)
async def get_daily(difficulty: str = None):
    """List the active daily set, oldest first."""
    if difficulty and difficulty not in DIFFICULTIES:
        raise HTTPException(status_code=400, detail=f"Unknown difficulty: {difficulty}")
    try:
        entries = storage.list_active_entries(difficulty)
    except StoreError as e:
        logger.error(f"Failed to list active set: {e}")
        raise HTTPException(status_code=503, detail="Active set unavailable")

    words = [ActiveWord(**entry.to_dict()) for entry in entries]
    return DailyResponse(total=len(words), words=words)


@app.get("/api/events/recent")
async def get_recent_events(event_type: str = None, limit: int = 50):
    """Get recent events."""
    if not hasattr(storage, 'get_recent_events'):
        return {"error": "Event logging not available with current storage"}

    try:
        events = storage.get_recent_events(event_type, limit)
    except StoreError as e:
        logger.error(f"Failed to read events: {e}")
        raise HTTPException(status_code=503, detail="Event log unavailable")
    # Convert datetime objects to strings for JSON serialization
    for event in events:
        if 'timestamp' in event and hasattr(event['timestamp'], 'isoformat'):
            event['timestamp'] = event['timestamp'].isoformat()
    return {"events": events}


def create_app():
    """Factory function for creating the app (useful for testing)."""
    return app
