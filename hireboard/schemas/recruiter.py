from datetime import datetime

from pydantic import BaseModel, ConfigDict


class RecruiterOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    company_name: str | None = None
    position: str | None = None
    avatar_url: str | None = None
    updated_at: datetime | None = None
