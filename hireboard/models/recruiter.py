from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from ..database import Base, utcnow


class Recruiter(Base):
    """Recruiter profile, one-to-one with a recruiter user."""

    __tablename__ = "recruiters"

    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), index=True, nullable=True)
    phone = Column(String(20), nullable=True)
    company_name = Column(String(150), nullable=True)
    position = Column(String(150), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="recruiter")
