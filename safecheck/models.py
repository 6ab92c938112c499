# safecheck/models.py
# Request/response models shared by the agents and the HTTP layer
from __future__ import annotations

import math
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic_core import PydanticCustomError


class ValidationError(ValueError):
    """Rejected input; state is left untouched and the caller gets a 400."""


# error types whose message is already meant for the API caller
READABLE_ERRORS = {"number_type", "number_finite", "chat_id_type", "contacts_type", "message_required"}


def _finite_number(value, field: str):
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PydanticCustomError("number_type", "{field} must be a number", {"field": field})
    if not math.isfinite(value):
        raise PydanticCustomError("number_finite", "{field} must be a finite number", {"field": field})
    return value


# -------------------------------------------------------------------
# Contacts
# -------------------------------------------------------------------
class Contact(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    chat_id: Optional[str] = Field(default=None, alias="chatId")  # Telegram chat id; None = display-only

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("chat_id", mode="before")
    @classmethod
    def _chat_id(cls, v):
        if v is None:
            return None
        if isinstance(v, bool) or not isinstance(v, (str, int)):
            raise PydanticCustomError("chat_id_type", "chatId must be a string or an integer")
        return str(v).strip() or None

    @property
    def reachable(self) -> bool:
        return bool(self.chat_id)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# -------------------------------------------------------------------
# Requests
# -------------------------------------------------------------------
class ResetRequest(BaseModel):
    duration: Optional[int] = None  # ms; only used when > 0
    reset_by: Optional[StrictStr] = Field(default=None, alias="resetBy")

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, v):
        v = _finite_number(v, "duration")
        return None if v is None else int(v)


class ContactsRequest(BaseModel):
    contacts: List[Contact] = Field(default=None, validate_default=True)

    @field_validator("contacts", mode="before")
    @classmethod
    def _contacts(cls, v):
        if not isinstance(v, list):
            raise PydanticCustomError("contacts_type", "Contacts must be an array")
        return v


class DurationRequest(BaseModel):
    hours: float = 0
    minutes: float = 0
    seconds: float = 0

    @field_validator("hours", "minutes", "seconds", mode="before")
    @classmethod
    def _part(cls, v, info):
        v = _finite_number(v, info.field_name)
        return 0 if v is None else v


class AlertRequest(BaseModel):
    message: str = Field(default=None, validate_default=True)

    @field_validator("message", mode="before")
    @classmethod
    def _message(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise PydanticCustomError("message_required", "Message is required")
        return v
