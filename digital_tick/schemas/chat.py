"""Chat schemas."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from digital_tick.services.core.quota import PLANS


class ChatMessage(BaseModel):
    """One transcript turn. Content is text or a list of content parts."""

    role: Literal["user", "assistant"]
    content: str | list[dict[str, Any]]


class ImageAttachment(BaseModel):
    """Image sent alongside the latest user turn."""

    data_url: str = Field(..., alias="dataUrl")

    model_config = ConfigDict(populate_by_name=True)


class ChatRequest(BaseModel):
    """Schema for POST /chat."""

    messages: list[ChatMessage] = Field(..., min_length=1)
    plan: str = "free"
    user_id: str | int | None = Field(default=None, alias="userId")
    session_id: str | None = Field(default=None, alias="sessionId")
    image: ImageAttachment | None = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("plan")
    @classmethod
    def normalize_plan(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in PLANS:
            raise ValueError(f"plan must be one of: {list(PLANS)}")
        return value

    @field_validator("user_id")
    @classmethod
    def stringify_user_id(cls, value: str | int | None) -> str | None:
        if value is None:
            return None
        value = str(value)
        return value or None


class ChatResponse(BaseModel):
    """Successful chat reply."""

    reply: str
    plan: str
    used_this_month: int | None = Field(default=None, alias="usedThisMonth")
    allowed_per_month: int | None = Field(default=None, alias="allowedPerMonth")

    model_config = ConfigDict(populate_by_name=True)


class LimitReachedResponse(BaseModel):
    """Monthly allowance spent. Returned with a 200 status."""

    error: str
    error_code: Literal["LIMIT_REACHED"] = Field(default="LIMIT_REACHED", alias="errorCode")
    allowed_per_month: int = Field(alias="allowedPerMonth")
    used_this_month: int = Field(alias="usedThisMonth")
    plan: str

    model_config = ConfigDict(populate_by_name=True)
