"""Bulk membership changes with per-item outcomes."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Callable, Iterable

from gl_members.models import MAX_BATCH_WORKERS, BatchItemError, BatchResult

if TYPE_CHECKING:
    from gl_members.client import GitLabClient


def _attempt(operation: Callable[[int], object], user_id: int) -> str | None:
    """Run one item; return the failure message, or None on success."""
    try:
        operation(user_id)
    except Exception as e:
        return str(e) or e.__class__.__name__
    return None


def run_batch(user_ids: Iterable[int], operation: Callable[[int], object], max_workers: int = 1) -> BatchResult:
    """
    Apply ``operation`` to every user id and collect the outcomes.

    A failing item never stops the remaining ones. Outcomes are folded in
    submission order whether items run sequentially or on a thread pool, so
    ``success_user_ids`` keeps the input order and every id yields exactly
    one outcome.
    """
    user_ids = list(user_ids)
    workers = max(1, min(max_workers, MAX_BATCH_WORKERS, len(user_ids) or 1))

    if workers == 1:
        outcomes = [_attempt(operation, uid) for uid in user_ids]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(lambda uid: _attempt(operation, uid), user_ids))

    result = BatchResult()
    for uid, error in zip(user_ids, outcomes):
        if error is None:
            result.success_user_ids.append(uid)
        else:
            result.failed.append(BatchItemError(user_id=uid, message=error))
    return result


class BatchMutator:
    """Adds or removes many users on a project through a GitLabClient."""

    def __init__(self, client: GitLabClient, max_workers: int = 1):
        self.client = client
        self.max_workers = max_workers
        self.logger = logging.getLogger("gl-members")

    def add_members(
        self,
        project_ref: int | str,
        user_ids: Iterable[int],
        access_level: int,
        expires_at: str | None = None,
    ) -> BatchResult:
        self.client.profiles.require()
        return self._run(
            "add",
            project_ref,
            user_ids,
            lambda uid: self.client.add_member(project_ref, uid, access_level, expires_at),
        )

    def remove_members(self, project_ref: int | str, user_ids: Iterable[int]) -> BatchResult:
        self.client.profiles.require()
        return self._run("remove", project_ref, user_ids, lambda uid: self.client.remove_member(project_ref, uid))

    def _run(self, action: str, project_ref, user_ids, operation) -> BatchResult:
        user_ids = list(user_ids)
        self.logger.info(f"Batch {action}: {len(user_ids)} users on {project_ref}")
        result = run_batch(user_ids, operation, max_workers=self.max_workers)

        for failure in result.failed:
            self.logger.warning(f"✗ user {failure.user_id}: {failure.message}")

        record = self.logger.makeRecord("gl-members", logging.INFO, "", 0, "", (), None)
        record.batch_result = result
        self.logger.handle(record)
        return result
