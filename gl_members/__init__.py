"""
gl-members: browse GitLab projects, manage project membership in bulk, and keep a
local roster of people organized into groups.

Environment:
    GITLAB_TOKEN   - GitLab Personal Access Token
    GITLAB_URL     - GitLab instance URL (default: https://gitlab.com)
    GL_MEMBERS_DB  - Path of the local roster database
"""

from gl_members.batch import BatchMutator, run_batch
from gl_members.cli import main
from gl_members.client import GitLabClient, encode_project_ref, resolve_total
from gl_members.errors import GitLabMembersError, RemoteError, StoreError, TransportError, ValidationError
from gl_members.models import (
    ACCESS_LEVELS,
    DEFAULT_MAX_RETRIES,
    RETRY_BACKOFF_FACTOR,
    RETRYABLE_STATUS_CODES,
    BatchItemError,
    BatchResult,
    ConnectionProfile,
    LocalGroup,
    LocalMember,
    LocalMemberUpsert,
    Page,
    ProjectMember,
    ProjectSummary,
)
from gl_members.profile import ProfileHolder
from gl_members.store import Database, RosterStore, open_store

__version__ = "0.1.0"
__all__ = [
    "main",
    "__version__",
    "GitLabClient",
    "encode_project_ref",
    "resolve_total",
    "BatchMutator",
    "run_batch",
    "ProfileHolder",
    "Database",
    "RosterStore",
    "open_store",
    "GitLabMembersError",
    "TransportError",
    "RemoteError",
    "ValidationError",
    "StoreError",
    "ACCESS_LEVELS",
    "DEFAULT_MAX_RETRIES",
    "RETRY_BACKOFF_FACTOR",
    "RETRYABLE_STATUS_CODES",
    "BatchItemError",
    "BatchResult",
    "ConnectionProfile",
    "LocalGroup",
    "LocalMember",
    "LocalMemberUpsert",
    "Page",
    "ProjectMember",
    "ProjectSummary",
]
