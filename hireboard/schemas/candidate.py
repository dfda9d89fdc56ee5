from pydantic import BaseModel, ConfigDict


class CandidateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    education: str | None = None
    experience: str | None = None
    skills: str | None = None
    resume_url: str | None = None
    resume_name: str | None = None
    avatar_url: str | None = None
