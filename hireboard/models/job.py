from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import Base, new_id, utcnow
from .status import JobStatus


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=new_id)
    recruiter_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    requirements = Column(Text, nullable=True)
    location = Column(String(100), nullable=True)
    company_name = Column(String(150), nullable=True)
    salary_range = Column(String(50), nullable=True)  # free text, e.g. "$50,000 - $70,000"
    status = Column(String(20), nullable=False, default=JobStatus.OPEN.value)
    # Advisory only: bumped once per application, never decremented.
    applicant_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    recruiter = relationship("User", back_populates="jobs")
    # Deleting a job also removes its applications at ORM level.
    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan")
