"""Error kinds raised by gl-members."""

from __future__ import annotations


class GitLabMembersError(Exception):
    """Base class for all gl-members errors."""


class TransportError(GitLabMembersError):
    """No response was received from GitLab (connection failure, timeout)."""

    def __init__(self, detail: str):
        super().__init__(f"GitLab request failed: {detail}")
        self.detail = detail


class RemoteError(GitLabMembersError):
    """GitLab answered with a non-success status."""

    def __init__(self, status: int, body: str = ""):
        super().__init__(f"GitLab API error {status}: {body[:500]}")
        self.status = status
        self.body = body


class ValidationError(GitLabMembersError):
    """Required input is missing or malformed; nothing was sent."""


class StoreError(GitLabMembersError):
    """Local roster storage failed."""
