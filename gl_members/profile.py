"""Shared GitLab connection profile."""

from __future__ import annotations

import threading

from gl_members.errors import ValidationError
from gl_members.models import ConnectionProfile


class ProfileHolder:
    """Holds the current ConnectionProfile and swaps it atomically.

    Profiles are immutable, so a reader either gets the old profile or the
    new one, never a mix of both.
    """

    def __init__(self, profile: ConnectionProfile | None = None):
        self._lock = threading.Lock()
        self._profile = profile

    def get(self) -> ConnectionProfile | None:
        with self._lock:
            return self._profile

    def require(self) -> ConnectionProfile:
        profile = self.get()
        if profile is None:
            raise ValidationError(
                "GitLab connection is not configured. Run 'gl-members set-config' or set GITLAB_URL/GITLAB_TOKEN."
            )
        return profile

    def set(self, base_url: str, token: str) -> ConnectionProfile:
        profile = build_profile(base_url, token)
        self.swap(profile)
        return profile

    def swap(self, profile: ConnectionProfile | None) -> None:
        with self._lock:
            self._profile = profile

    def clear(self) -> None:
        self.swap(None)


def build_profile(base_url: str | None, token: str | None) -> ConnectionProfile:
    """Validate and build a profile from raw user input."""
    base_url = (base_url or "").strip()
    token = (token or "").strip()
    if not base_url:
        raise ValidationError("base URL is empty")
    if not token:
        raise ValidationError("token is empty")
    return ConnectionProfile(base_url=base_url, token=token)
