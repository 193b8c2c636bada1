"""GitLab API client for project search and membership management."""

from __future__ import annotations

import logging
import threading
import time
import urllib.parse

import requests

from gl_members.errors import RemoteError, TransportError, ValidationError
from gl_members.models import (
    DEFAULT_MAX_RETRIES,
    MAX_PER_PAGE,
    PER_PAGE,
    RETRY_BACKOFF_FACTOR,
    RETRYABLE_STATUS_CODES,
    TOTAL_HEADER,
    ConnectionProfile,
    Page,
    ProjectMember,
    ProjectSummary,
)
from gl_members.profile import ProfileHolder


def resolve_total(header_value: str | None, page: int, per_page: int, returned: int) -> int:
    """
    Resolve the total item count of a paginated listing.

    Trusts the ``X-Total`` header when it holds a positive integer. Otherwise
    the total is a best-effort estimate: one more than what has been seen so
    far when the page came back full (there may be a next page), exactly what
    has been seen when it came back short (this was the last page).
    """
    if header_value:
        try:
            total = int(header_value)
        except ValueError:
            total = 0
        if total > 0:
            return total

    seen = (page - 1) * per_page + returned
    return seen + 1 if returned >= per_page else seen


def extract_project_path(ref: str) -> str:
    """Extract the namespace/project path from a GitLab URL or bare path."""
    parsed = urllib.parse.urlparse(ref)
    if parsed.scheme and parsed.netloc:
        # Full URL: https://gitlab.com/myorg/myproject/-/project_members
        path = parsed.path.strip("/")
        if "/-/" in path:
            path = path[: path.index("/-/")]
        path = path.removesuffix("/-").removesuffix(".git")
        return path
    return ref.strip("/")


def encode_project_ref(ref: int | str) -> str:
    """
    Encode a project reference for use in a request path.

    Numeric ids pass through verbatim so GitLab treats them as ids; anything
    else is a path and gets fully percent-encoded (``/`` included).
    """
    if isinstance(ref, int):
        return str(ref)
    ref = ref.strip()
    if ref.isascii() and ref.isdigit():
        return ref
    path = extract_project_path(ref)
    if not path:
        raise ValidationError("project reference is empty")
    return urllib.parse.quote(path, safe="")


def _check_paging(page: int, per_page: int) -> None:
    if page < 1:
        raise ValidationError(f"page must be >= 1, got {page}")
    if per_page < 1:
        raise ValidationError(f"per_page must be a positive integer, got {per_page}")


class GitLabClient:
    """Thin wrapper around GitLab REST API v4 with retry logic.

    The connection profile is read from ``profiles`` on every request, so it
    can be replaced while the client is in use.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        profiles: ProfileHolder | None = None,
    ):
        if profiles is None:
            profiles = ProfileHolder()
            if base_url and token:
                profiles.swap(ConnectionProfile(base_url=base_url, token=token))
        self.profiles = profiles
        self._local = threading.local()
        self.max_retries = max_retries
        self.logger = logging.getLogger("gl-members")

    @property
    def session(self) -> requests.Session:
        """Per-thread session; batch workers never share one."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update({"Content-Type": "application/json"})
            self._local.session = session
        return session

    def _request(self, method: str, endpoint: str, accept: tuple[int, ...] = (), **kwargs) -> requests.Response:
        """
        Make an HTTP request with retry logic for transient failures.

        Statuses listed in ``accept`` are returned to the caller instead of
        raising RemoteError.
        """
        profile = self.profiles.require()
        url = f"{profile.api_url}{endpoint}"
        headers = {"PRIVATE-TOKEN": profile.token}

        for attempt in range(self.max_retries + 1):
            try:
                self.logger.debug(
                    f"{method.upper()} {url} {kwargs.get('params', '')} {kwargs.get('json', '')} "
                    f"(attempt {attempt + 1}/{self.max_retries + 1})"
                )
                resp = self.session.request(method, url, headers=headers, **kwargs)
            except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
                if attempt < self.max_retries:
                    wait_time = RETRY_BACKOFF_FACTOR * (2**attempt)
                    self.logger.warning(f"Connection error, retrying in {wait_time:.1f}s: {e}")
                    time.sleep(wait_time)
                    continue
                raise TransportError(str(e)) from e

            # Retry on rate limit or server errors
            if resp.status_code in RETRYABLE_STATUS_CODES and attempt < self.max_retries:
                wait_time = self._calculate_backoff(resp, attempt)
                self.logger.warning(f"Retryable error {resp.status_code}, waiting {wait_time:.1f}s before retry")
                time.sleep(wait_time)
                continue

            if resp.status_code in accept:
                return resp
            if resp.status_code >= 400:
                self.logger.error(f"API error {resp.status_code}: {resp.text[:500]}")
                raise RemoteError(resp.status_code, resp.text)
            return resp

        raise RuntimeError("Unexpected retry loop exit")

    def _calculate_backoff(self, resp: requests.Response, attempt: int) -> float:
        """Calculate backoff time, respecting Retry-After header for 429s."""
        if resp.status_code == 429:
            retry_after = resp.headers.get("Retry-After")
            if retry_after:
                try:
                    return float(retry_after)
                except ValueError:
                    pass  # Fall through to exponential backoff
        return RETRY_BACKOFF_FACTOR * (2**attempt)

    def _get_page(self, endpoint: str, params: dict, page: int, per_page: int) -> tuple[list[dict], int]:
        _check_paging(page, per_page)
        params = dict(params, page=page, per_page=per_page)
        resp = self._request("GET", endpoint, params=params)
        data = resp.json()
        total = resolve_total(resp.headers.get(TOTAL_HEADER), page, per_page, len(data))
        return data, total

    # -- Projects --

    def search_projects(self, keyword: str = "", page: int = 1, per_page: int = PER_PAGE) -> Page[ProjectSummary]:
        """Search projects, most recently active first."""
        params = {"simple": "true", "order_by": "last_activity_at", "sort": "desc"}
        keyword = (keyword or "").strip()
        if keyword:
            params["search"] = keyword
        data, total = self._get_page("/projects", params, page, per_page)
        return Page(items=[ProjectSummary.from_api(p) for p in data], total=total)

    def get_project(self, project_ref: int | str) -> ProjectSummary:
        """Get project details by id or path."""
        resp = self._request("GET", f"/projects/{encode_project_ref(project_ref)}")
        return ProjectSummary.from_api(resp.json())

    # -- Members --

    def list_project_members(
        self, project_ref: int | str, page: int = 1, per_page: int = PER_PAGE
    ) -> Page[ProjectMember]:
        """List one page of project members, including inherited ones."""
        endpoint = f"/projects/{encode_project_ref(project_ref)}/members/all"
        data, total = self._get_page(endpoint, {}, page, per_page)
        return Page(items=[ProjectMember.from_api(m) for m in data], total=total)

    def list_all_project_members(self, project_ref: int | str) -> list[ProjectMember]:
        """Fetch every page of project members."""
        members: list[ProjectMember] = []
        page = 1
        while True:
            result = self.list_project_members(project_ref, page=page, per_page=MAX_PER_PAGE)
            members.extend(result.items)
            if len(result.items) < MAX_PER_PAGE:
                break
            page += 1
        return members

    def add_member(
        self, project_ref: int | str, user_id: int, access_level: int, expires_at: str | None = None
    ) -> None:
        """Add a user to a project. Adding an existing member succeeds."""
        data: dict = {"user_id": user_id, "access_level": access_level}
        if expires_at and expires_at.strip():
            data["expires_at"] = expires_at.strip()

        resp = self._request(
            "POST", f"/projects/{encode_project_ref(project_ref)}/members", accept=(409,), json=data
        )
        if resp.status_code == 409:
            self.logger.debug(f"User {user_id} is already a member of {project_ref}")

    def remove_member(self, project_ref: int | str, user_id: int) -> None:
        """Remove a user from a project. Removing a non-member succeeds."""
        resp = self._request("DELETE", f"/projects/{encode_project_ref(project_ref)}/members/{user_id}", accept=(404,))
        if resp.status_code == 404:
            self.logger.debug(f"User {user_id} is not a member of {project_ref}")
