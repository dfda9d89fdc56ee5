"""
Status and role vocabularies shared by the models, the lifecycle engine and the API.

All enums inherit from ``(str, Enum)`` so members compare equal to the plain
strings stored in the database and serialize naturally to JSON.
"""

from enum import Enum


class Role(str, Enum):
    CANDIDATE = "candidate"
    RECRUITER = "recruiter"


class JobStatus(str, Enum):
    OPEN = "Open"
    CLOSED = "Closed"


class ApplicationStatus(str, Enum):
    """Application lifecycle states.

    Pending is the initial state. Hired, Rejected and Withdrawn are terminal.
    """

    PENDING = "Pending"
    INTERVIEW = "Interview"
    HIRED = "Hired"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {ApplicationStatus.HIRED, ApplicationStatus.REJECTED, ApplicationStatus.WITHDRAWN}
)
