from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ApplicationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    job_id: str
    candidate_id: str
    full_name: str
    email: str
    resume_url: str
    resume_name: str | None = None
    cover_letter_url: str | None = None
    status: str
    scheduled_at: datetime | None = None
    created_at: datetime | None = None


class StatusChangeIn(BaseModel):
    status: str = Field(..., min_length=1)
    scheduled_at: str | None = None  # ISO 8601; required when moving to Interview
    timezone: str | None = None  # IANA name applied to a naive scheduled_at
