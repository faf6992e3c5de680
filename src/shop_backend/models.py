from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class DatabaseState(str, Enum):
    CONNECTED = "connected"
    UNAVAILABLE = "unavailable"


class HealthStatus(BaseModel):
    status: str = "ok"
    pid: int
    database: DatabaseState
