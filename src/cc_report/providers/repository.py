"""Repository data provider built from a GitHub-style API payload.

The payload is validated with Pydantic and exposed through the data contract:
verbatim API fields under ``raw.github_api`` and derived values under
``calculated``. The flat view is projected from the namespaced document
through one field table, so every hinted path resolves to exactly the value
the flat view reports for the same field.
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any, NamedTuple, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cc_report.core.contract import flatten_value, resolve_query
from cc_report.core.hints import HintScope, QueryHint
from cc_report.core.types import validate_namespaced_document

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cc_report.core.types import NamespacedDocument


class _Field(NamedTuple):
    key: str
    query: str
    description: str
    hinted: bool = False


_FIELDS: tuple[_Field, ...] = (
    _Field("REPOSITORY_ID", ".raw.github_api.id", "Repository ID"),
    _Field("REPOSITORY_NAME", ".raw.github_api.name", "Repository name from GitHub API", True),
    _Field("REPOSITORY_FULL_NAME", ".raw.github_api.full_name", "Repository owner/name", True),
    _Field("REPOSITORY_OWNER", ".raw.github_api.owner.login", "Repository owner login", True),
    _Field("REPOSITORY_OWNER_TYPE", ".raw.github_api.owner.type", "User or Organization"),
    _Field("REPOSITORY_DESCRIPTION", ".raw.github_api.description", "Repository description"),
    _Field("REPOSITORY_URL", ".raw.github_api.html_url", "Repository web URL"),
    _Field("REPOSITORY_HOMEPAGE", ".raw.github_api.homepage", "Project homepage"),
    _Field("REPOSITORY_LANGUAGE", ".raw.github_api.language", "Primary language", True),
    _Field("REPOSITORY_TOPICS", ".raw.github_api.topics", "Repository topics", True),
    _Field("REPOSITORY_LICENSE", ".raw.github_api.license", "License name"),
    _Field("REPOSITORY_IS_PRIVATE", ".raw.github_api.private", "Private repository flag"),
    _Field("REPOSITORY_IS_FORK", ".raw.github_api.fork", "Fork flag"),
    _Field("REPOSITORY_IS_ARCHIVED", ".raw.github_api.archived", "Archived flag"),
    _Field("REPOSITORY_DEFAULT_BRANCH", ".raw.github_api.default_branch", "Default branch"),
    _Field("REPOSITORY_STARGAZERS_COUNT", ".raw.github_api.stargazers_count", "Star count", True),
    _Field("REPOSITORY_WATCHERS_COUNT", ".raw.github_api.watchers_count", "Watcher count"),
    _Field("REPOSITORY_FORKS_COUNT", ".raw.github_api.forks_count", "Fork count", True),
    _Field("REPOSITORY_OPEN_ISSUES_COUNT", ".raw.github_api.open_issues_count", "Open issue count", True),
    _Field("REPOSITORY_SIZE", ".raw.github_api.size", "Repository size in KB"),
    _Field("REPOSITORY_CREATED_AT", ".raw.github_api.created_at", "Creation timestamp"),
    _Field("REPOSITORY_UPDATED_AT", ".raw.github_api.updated_at", "Last update timestamp"),
    _Field("REPOSITORY_PUSHED_AT", ".raw.github_api.pushed_at", "Last push timestamp"),
    _Field(
        "REPOSITORY_AGE_DAYS",
        ".calculated.time_calculations.age_days",
        "Repository age in days (calculated)",
        True,
    ),
    _Field(
        "REPOSITORY_DAYS_SINCE_UPDATED",
        ".calculated.time_calculations.days_since_updated",
        "Days since last update (calculated)",
        True,
    ),
    _Field(
        "REPOSITORY_FORKS_TO_STARS_RATIO",
        ".calculated.mathematical_ratios.forks_to_stars_ratio",
        "Forks per star (calculated)",
    ),
)


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    # Naive timestamps from upstream are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value


def _iso(value: datetime.datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(datetime.UTC).isoformat().replace("+00:00", "Z")


class RepositoryOwner(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    login: str = Field(min_length=1)
    # "User", "Organization" or "Bot"
    type: str = "User"


class RepositoryData(BaseModel):
    """One repository, as returned by ``GET /repos/{owner}/{repo}``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    owner: RepositoryOwner
    description: str | None = None
    html_url: str = ""
    homepage: str | None = None
    language: str | None = None
    topics: tuple[str, ...] = ()
    license: str | None = None
    private: bool = False
    fork: bool = False
    archived: bool = False
    default_branch: str = "main"
    stargazers_count: int = Field(default=0, ge=0)
    watchers_count: int = Field(default=0, ge=0)
    forks_count: int = Field(default=0, ge=0)
    open_issues_count: int = Field(default=0, ge=0)
    size: int = Field(default=0, ge=0)
    created_at: datetime.datetime
    updated_at: datetime.datetime
    pushed_at: datetime.datetime | None = None

    # Reference time for calculated fields; not part of the API payload
    as_of: datetime.datetime = Field(
        default_factory=lambda: datetime.datetime.now(datetime.UTC), exclude=True
    )

    @field_validator("license", mode="before")
    @classmethod
    def _license_name(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return v.get("name")
        return v

    @field_validator("created_at", "updated_at", "pushed_at", "as_of")
    @classmethod
    def _normalize_tz(cls, v: datetime.datetime | None) -> datetime.datetime | None:
        return None if v is None else _as_utc(v)

    @classmethod
    def from_api_response(
        cls, payload: Mapping[str, Any], now: datetime.datetime | None = None
    ) -> Self:
        """Validate an API payload.

        Raises:
            pydantic.ValidationError: If required fields are missing or invalid.
        """
        data = dict(payload)
        if now is not None:
            data["as_of"] = now
        return cls.model_validate(data)

    # --- Calculations ---

    @property
    def age_days(self) -> int:
        return (self.as_of - self.created_at).days

    @property
    def days_since_updated(self) -> int:
        return (self.as_of - self.updated_at).days

    @property
    def forks_to_stars_ratio(self) -> float:
        if self.stargazers_count == 0:
            return 0.0
        return round(self.forks_count / self.stargazers_count, 4)

    # --- Data contract ---

    def get_hints(self) -> list[QueryHint]:
        return [
            QueryHint(f.query, f.description, HintScope.SINGLE_ITEM)
            for f in _FIELDS
            if f.hinted
        ]

    def to_namespaced_document(self) -> NamespacedDocument:
        return validate_namespaced_document({
            "raw": {
                "github_api": {
                    "id": self.id,
                    "name": self.name,
                    "full_name": self.full_name,
                    "owner": {"login": self.owner.login, "type": self.owner.type},
                    "description": self.description,
                    "html_url": self.html_url,
                    "homepage": self.homepage,
                    "language": self.language,
                    "topics": list(self.topics),
                    "license": self.license,
                    "private": self.private,
                    "fork": self.fork,
                    "archived": self.archived,
                    "default_branch": self.default_branch,
                    "stargazers_count": self.stargazers_count,
                    "watchers_count": self.watchers_count,
                    "forks_count": self.forks_count,
                    "open_issues_count": self.open_issues_count,
                    "size": self.size,
                    "created_at": _iso(self.created_at),
                    "updated_at": _iso(self.updated_at),
                    "pushed_at": _iso(self.pushed_at),
                }
            },
            "calculated": {
                "time_calculations": {
                    "age_days": self.age_days,
                    "days_since_updated": self.days_since_updated,
                },
                "mathematical_ratios": {
                    "forks_to_stars_ratio": self.forks_to_stars_ratio,
                },
            },
        })

    def to_flat_view(self) -> dict[str, str]:
        document = self.to_namespaced_document()
        return {f.key: flatten_value(resolve_query(document, f.query)) for f in _FIELDS}
