"""
Event Actions Forms

Pydantic models validating registry input before it reaches storage.
"""

from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator, model_validator

from eventactions.contracts.types import DEFAULT_ENTRYPOINT, ActionType


class RegisterEventForm(BaseModel):
    """Input for registering an event."""

    name: str = Field(..., min_length=1, max_length=190, description="Event name (case-sensitive)")
    org_id: int = Field(..., description="Owning organization")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("event name must not be blank")
        return value


class CreateEventActionForm(BaseModel):
    """Input for creating an event action."""

    name: str = Field(..., min_length=1, max_length=190)
    type: ActionType
    url: str = Field(..., description="Webhook URL or runner base URL")
    script: str | None = Field(None, description="Script source (code actions)")
    script_language: str | None = Field(None, description="Script language (code actions)")
    runner_secret: str | None = Field(None, description="Runner bearer token (code actions)")
    entrypoint: str = Field(DEFAULT_ENTRYPOINT, min_length=1, description="Script file name the runner executes")
    registered_events: list[str] = Field(default_factory=list)

    @field_validator("url")
    @classmethod
    def url_is_http(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("url must be an absolute http(s) URL")
        return value

    @model_validator(mode="after")
    def code_fields_present(self) -> "CreateEventActionForm":
        if self.type == ActionType.CODE:
            missing = [
                name
                for name in ("script", "script_language", "runner_secret")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"code actions require: {', '.join(missing)}")
        return self
