from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from ..database import Base, new_id, utcnow


class User(Base):
    """Authenticated identity (candidate or recruiter)."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # store hashed password
    role = Column(String(50), nullable=False)  # recruiter / candidate
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    jobs = relationship("Job", back_populates="recruiter")
    candidate = relationship("Candidate", back_populates="user", uselist=False)
    recruiter = relationship("Recruiter", back_populates="user", uselist=False)
