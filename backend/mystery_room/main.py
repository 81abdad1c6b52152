"""
Mystery Room Backend - FastAPI Application Entry Point
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mystery_room import __version__
from mystery_room.api import room
from mystery_room.config import get_log_level

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Mystery Room",
    description="Puzzle progression engine for the mystery room exhibit",
    version=__version__,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(room.router, prefix="/api/room", tags=["room"])


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"status": "ok", "name": "Mystery Room", "version": __version__}


@app.get("/api/rooms")
async def list_rooms():
    """List available rooms"""
    from mystery_room.engine.room_loader import RoomLoader

    loader = RoomLoader()
    rooms = loader.list_rooms()
    return {"rooms": rooms}
