from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class WebhookResult(CamelModel):
    success: bool
    skipped: bool | None = None
    provider_session_id: str | None = None
    user_message: str | None = None
    reply_text: str | None = None
    choices: list[Any] | None = None
    error: str | None = None
    timestamp: str | None = None


class ServiceEndpoints(BaseModel):
    webhook: str = "/webhook/trillion"
    test: str = "/test/webhook"
    health: str = "/health"
    sessions: str = "/sessions"


class ServiceInfoResponse(CamelModel):
    message: str
    version: str
    endpoints: ServiceEndpoints = Field(default_factory=ServiceEndpoints)
    signature_verification: bool
    startup_issues: list[str] = Field(default_factory=list)
    timestamp: str


class HealthResponse(CamelModel):
    status: str = "healthy"
    timestamp: str
    active_sessions: int


class SessionView(CamelModel):
    session_key: str
    session_uid: str
    user_id: str
    channel_id: str
    user_name: str
    created_at: str
    last_activity: str


class SessionListResponse(CamelModel):
    total_sessions: int
    sessions: list[SessionView]


class ClearSessionsResponse(CamelModel):
    success: bool
    message: str
    timestamp: str


class SessionCreateRequest(BaseModel):
    user_id: str | None = None
    channel_id: str | None = None
    user_name: str | None = None

    @field_validator("user_id", "channel_id", "user_name", mode="before")
    @classmethod
    def _coerce_to_text(cls, value: Any) -> Any:
        if isinstance(value, (bool, int, float)):
            return str(value) if value else None
        return value


class SessionCreateResponse(CamelModel):
    success: bool
    session_key: str
    session_uid: str
    message: str = "Session created successfully"


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    timestamp: str | None = None
