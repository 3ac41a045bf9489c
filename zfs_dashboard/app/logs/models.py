"""Pydantic models for the backend log buffer."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ListenerState(str, Enum):
    UNREGISTERED = "unregistered"
    REGISTERING = "registering"
    REGISTERED = "registered"


class LogMessage(BaseModel):
    """One received backend log line."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=1)
    content: str = Field(min_length=1)
    timestamp: datetime


class UiState(BaseModel):
    """Log panel state that survives restarts."""

    is_visible: bool = True


class LogBufferOut(BaseModel):
    is_visible: bool
    listener_state: ListenerState
    messages: list[LogMessage] = Field(default_factory=list)
