from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class JobResult:
    """
    A single normalized job posting.

    title/count/location/source_url/company/ats_source are always non-empty once
    built through normalize.make_job(); optional fields are either a real value
    or None, never "".
    """

    title: str
    count: str
    location: str
    source_url: str
    company: str
    ats_source: str  # provider label, e.g. "Greenhouse"; not part of identity
    salary: str | None = None
    date_posted: str | None = None  # humanized, e.g. "3 days ago"
    job_type: str | None = None
    description: str | None = None
    skills: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire form (camelCase keys); absent optional fields are omitted."""
        out: dict[str, Any] = {
            "title": self.title,
            "count": self.count,
            "location": self.location,
            "sourceUrl": self.source_url,
            "company": self.company,
            "atsSource": self.ats_source,
        }
        optional = {
            "salary": self.salary,
            "datePosted": self.date_posted,
            "jobType": self.job_type,
            "description": self.description,
            "skills": list(self.skills) if self.skills else None,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        return out


@dataclass(frozen=True)
class ProviderResult:
    """
    Outcome of one provider fetch.
    - skipped: provider had no credential and made no network call (not an error)
    - error: one human-readable diagnostic when the provider failed
    """

    source: str
    success: bool
    jobs: tuple[JobResult, ...] = ()
    error: str | None = None
    skipped: bool = False

    @classmethod
    def ok(cls, source: str, jobs: list[JobResult] | tuple[JobResult, ...]) -> ProviderResult:
        return cls(source=source, success=True, jobs=tuple(jobs))

    @classmethod
    def failed(cls, source: str, error: str) -> ProviderResult:
        return cls(source=source, success=False, error=error)

    @classmethod
    def skip(cls, source: str) -> ProviderResult:
        return cls(source=source, success=False, skipped=True)


@dataclass(frozen=True)
class SearchResult:
    """
    Orchestrator output for one company search.

    errors is None when no provider failed, so "nothing found" and "everything
    broke" stay distinguishable even though both have success=False.
    suggestions holds generic career-page hints, only filled when the search
    produced no concrete posting.
    """

    success: bool
    jobs: tuple[JobResult, ...]
    sources: tuple[str, ...]
    total_found: int
    errors: tuple[str, ...] | None = None
    suggestions: tuple[JobResult, ...] = ()
    stages: tuple[str, ...] = field(default=(), compare=False)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": self.success,
            "jobs": [j.to_dict() for j in self.jobs],
            "sources": list(self.sources),
            "totalFound": self.total_found,
        }
        if self.errors is not None:
            out["errors"] = list(self.errors)
        if self.suggestions:
            out["suggestions"] = [j.to_dict() for j in self.suggestions]
        return out
