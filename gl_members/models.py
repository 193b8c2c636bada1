"""Data models and constants for gl-members."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Generic, TypeVar

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_GITLAB_URL = "https://gitlab.com"
API_V4 = "/api/v4"
PER_PAGE = 20
MAX_PER_PAGE = 100
TOTAL_HEADER = "X-Total"

# Retry configuration
DEFAULT_MAX_RETRIES = 3
RETRY_BACKOFF_FACTOR = 0.5  # seconds
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

# Batch concurrency cap
MAX_BATCH_WORKERS = 8

# GitLab access level constants
ACCESS_LEVELS = {
    "no_access": 0,
    "minimal": 5,
    "guest": 10,
    "reporter": 20,
    "developer": 30,
    "maintainer": 40,
    "owner": 50,
}

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Remote records
# ---------------------------------------------------------------------------


@dataclass
class ProjectSummary:
    """GitLab project as returned by a search."""

    id: int
    name: str
    namespace: str
    path_with_namespace: str
    description: str | None = None
    last_activity_at: str = ""

    @classmethod
    def from_api(cls, data: dict) -> ProjectSummary:
        path = data["path_with_namespace"]
        ns = data.get("namespace") or {}
        namespace = ns.get("full_path") or ns.get("name")
        if not namespace:
            namespace = path.rsplit("/", 1)[0] if "/" in path else path
        return cls(
            id=data["id"],
            name=data["name"],
            namespace=namespace,
            path_with_namespace=path,
            description=data.get("description"),
            last_activity_at=data.get("last_activity_at") or "",
        )


@dataclass
class ProjectMember:
    """Membership record of a GitLab project."""

    id: int
    username: str
    name: str
    access_level: int
    avatar_url: str | None = None
    created_at: str | None = None
    expires_at: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> ProjectMember:
        return cls(
            id=data["id"],
            username=data["username"],
            name=data["name"],
            access_level=data["access_level"],
            avatar_url=data.get("avatar_url"),
            created_at=data.get("created_at"),
            expires_at=data.get("expires_at"),
        )

    def to_upsert(self, project_id: int | None = None, project_name: str | None = None) -> LocalMemberUpsert:
        return LocalMemberUpsert(
            user_id=self.id,
            username=self.username,
            name=self.name,
            avatar_url=self.avatar_url,
            project_id=project_id,
            project_name=project_name,
        )


@dataclass
class Page(Generic[T]):
    """One page of results plus the resolved total count.

    For remote listings ``total`` may be an estimate, see ``resolve_total``.
    """

    items: list[T]
    total: int

    def has_next_page(self, page: int, per_page: int) -> bool:
        return self.total > page * per_page


# ---------------------------------------------------------------------------
# Local roster records
# ---------------------------------------------------------------------------


@dataclass
class LocalMemberUpsert:
    user_id: int
    username: str
    name: str
    avatar_url: str | None = None
    project_id: int | None = None
    project_name: str | None = None


@dataclass
class LocalMember:
    """Cached person record."""

    user_id: int
    username: str
    name: str
    updated_at: str
    avatar_url: str | None = None
    project_id: int | None = None
    project_name: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> LocalMember:
        return cls(
            user_id=row["user_id"],
            username=row["username"],
            name=row["name"],
            updated_at=row["updated_at"],
            avatar_url=row["avatar_url"],
            project_id=row["project_id"],
            project_name=row["project_name"],
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class LocalGroup:
    id: int
    name: str
    created_at: str
    members_count: int = 0

    @classmethod
    def from_row(cls, row: dict) -> LocalGroup:
        return cls(
            id=row["id"],
            name=row["name"],
            created_at=row["created_at"],
            members_count=row.get("members_count", 0),
        )

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Batch results
# ---------------------------------------------------------------------------


@dataclass
class BatchItemError:
    user_id: int
    message: str


@dataclass
class BatchResult:
    """Outcome of a batch: each submitted user id lands in exactly one list."""

    success_user_ids: list[int] = field(default_factory=list)
    failed: list[BatchItemError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "success_user_ids": list(self.success_user_ids),
            "failed": [{"user_id": f.user_id, "message": f.message} for f in self.failed],
        }


# ---------------------------------------------------------------------------
# Connection profile
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConnectionProfile:
    """GitLab base URL and token. Immutable; replaced as a whole."""

    base_url: str
    token: str

    def __post_init__(self):
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def api_url(self) -> str:
        return f"{self.base_url}{API_V4}"

    def masked_token(self) -> str:
        if len(self.token) <= 4:
            return "*" * len(self.token)
        return f"{self.token[:4]}{'*' * (len(self.token) - 4)}"
