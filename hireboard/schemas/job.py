from datetime import datetime

from pydantic import BaseModel, ConfigDict


class JobOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    recruiter_id: str
    title: str
    description: str | None = None
    requirements: str | None = None
    location: str | None = None
    company_name: str | None = None
    salary_range: str | None = None
    status: str
    applicant_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

