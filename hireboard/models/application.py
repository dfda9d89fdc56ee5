from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import Base, new_id, utcnow
from .status import ApplicationStatus


class Application(Base):
    __tablename__ = "applications"
    # Authoritative duplicate guard; the repository's pre-insert lookup is only a fast path.
    __table_args__ = (
        UniqueConstraint("job_id", "candidate_id", name="uq_applications_job_candidate"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    job_id = Column(String(36), ForeignKey("jobs.id"), nullable=False, index=True)
    candidate_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    resume_url = Column(String(500), nullable=False)
    resume_name = Column(String(255), nullable=True)
    cover_letter_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=ApplicationStatus.PENDING.value)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)  # only set while in Interview
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    job = relationship("Job", back_populates="applications")
