from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from ..database import Base


class Candidate(Base):
    """Candidate profile, one-to-one with a candidate user."""

    __tablename__ = "candidates"

    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), index=True, nullable=True)
    phone = Column(String(50), nullable=True)
    education = Column(Text, nullable=True)
    experience = Column(Text, nullable=True)
    skills = Column(Text, nullable=True)
    resume_url = Column(String(500), nullable=True)
    resume_name = Column(String(255), nullable=True)
    avatar_url = Column(String(500), nullable=True)

    user = relationship("User", back_populates="candidate")
