"""
In-memory browsing over Open jobs: search, filter, sort, paginate.

Nothing in here raises on bad input. Unknown sort keys keep the incoming
order, unparseable dates sort as the epoch, and a salary without any digits
sorts as 0. That last rule means jobs with no salary sink to the bottom of
"HighestSalary" and float to the top of "LowestSalary".
"""
from dataclasses import dataclass
from datetime import datetime, timezone
import math
import re
from typing import Any, Iterable

from ..config import JOBS_PAGE_SIZE
from ..models.status import JobStatus

ALL = "All"

SORT_NEWEST = "Newest"
SORT_OLDEST = "Oldest"
SORT_HIGHEST_SALARY = "HighestSalary"
SORT_LOWEST_SALARY = "LowestSalary"
SORT_KEYS = (SORT_NEWEST, SORT_OLDEST, SORT_HIGHEST_SALARY, SORT_LOWEST_SALARY)

_FIRST_INT = re.compile(r"\d+")


def _field(job: Any, name: str) -> Any:
    if isinstance(job, dict):
        return job.get(name)
    return getattr(job, name, None)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def extract_salary(salary_range: Any) -> int:
    """First run of digits in the text: "$50,000 - $70,000" -> 50, "$90k" -> 90, None -> 0."""
    match = _FIRST_INT.search(_text(salary_range))
    return int(match.group()) if match else 0


def _timestamp(value: Any) -> float:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return 0.0
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()
    return 0.0


@dataclass(frozen=True)
class JobQuery:
    search: str = ""
    location: str = ALL
    company: str = ALL
    sort: str = SORT_NEWEST


def _is_active_filter(value: Any) -> bool:
    text = _text(value).strip()
    return bool(text) and text != ALL


class JobCatalog:
    def __init__(self, jobs: Iterable[Any], page_size: int = JOBS_PAGE_SIZE):
        self.jobs = [job for job in jobs if _field(job, "status") == JobStatus.OPEN.value]
        self.page_size = page_size if isinstance(page_size, int) and page_size > 0 else JOBS_PAGE_SIZE

    def locations(self) -> list[str]:
        return sorted({_text(_field(j, "location")) for j in self.jobs if _text(_field(j, "location")).strip()})

    def companies(self) -> list[str]:
        return sorted({_text(_field(j, "company_name")) for j in self.jobs if _text(_field(j, "company_name")).strip()})

    def filter(self, query: JobQuery | None = None) -> list[Any]:
        query = query or JobQuery()
        term = _text(query.search).strip().lower()

        matched = []
        for job in self.jobs:
            if term and not any(
                term in _text(_field(job, name)).lower() for name in ("title", "company_name", "location")
            ):
                continue
            if _is_active_filter(query.location) and _text(_field(job, "location")) != _text(query.location).strip():
                continue
            if _is_active_filter(query.company) and _text(_field(job, "company_name")) != _text(query.company).strip():
                continue
            matched.append(job)
        return self.sort(matched, query.sort)

    @staticmethod
    def sort(jobs: list[Any], sort_key: Any) -> list[Any]:
        if sort_key == SORT_NEWEST:
            return sorted(jobs, key=lambda j: _timestamp(_field(j, "created_at")), reverse=True)
        if sort_key == SORT_OLDEST:
            return sorted(jobs, key=lambda j: _timestamp(_field(j, "created_at")))
        if sort_key == SORT_HIGHEST_SALARY:
            return sorted(jobs, key=lambda j: extract_salary(_field(j, "salary_range")), reverse=True)
        if sort_key == SORT_LOWEST_SALARY:
            return sorted(jobs, key=lambda j: extract_salary(_field(j, "salary_range")))
        return list(jobs)

    def total_pages(self, query: JobQuery | None = None) -> int:
        return math.ceil(len(self.filter(query)) / self.page_size)

    def _clamp(self, page: Any, total_pages: int) -> int:
        try:
            n = int(page)
        except (TypeError, ValueError):
            n = 1
        return min(max(n, 1), max(total_pages, 1))

    def page(self, n: Any, query: JobQuery | None = None) -> list[Any]:
        return self.result(n, query)["items"]

    def result(self, n: Any, query: JobQuery | None = None) -> dict[str, Any]:
        matched = self.filter(query)
        total_pages = math.ceil(len(matched) / self.page_size)
        current = self._clamp(n, total_pages)
        start = (current - 1) * self.page_size
        return {
            "items": matched[start:start + self.page_size],
            "page": current,
            "page_size": self.page_size,
            "total": len(matched),
            "total_pages": total_pages,
        }
