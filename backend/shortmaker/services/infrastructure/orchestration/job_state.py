"""
Job State Broadcaster - observable state of one pipeline run.

One broadcaster instance is created per run and injected into every stage.
State is held as an immutable ``JobState`` snapshot; every mutation builds a
new snapshot, swaps it in with a single assignment and then notifies all
subscribers synchronously and in registration order, so observers see every
intermediate state.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, List, Optional, Tuple

from shortmaker.core import get_logger
from shortmaker.models.manifest import Manifest
from shortmaker.models.status import JobStatus, manifest_status_for

logger = get_logger(__name__, component="job_state")

Subscriber = Callable[["JobState"], None]


@dataclass(frozen=True)
class JobState:
    status: JobStatus = JobStatus.CREATED
    manifest: Optional[Manifest] = None
    logs: Tuple[str, ...] = field(default_factory=tuple)
    completed_images: int = 0
    total_images: int = 0
    error: Optional[str] = None
    video_url: Optional[str] = None

    @property
    def scene_count(self) -> int:
        return len(self.manifest.scenes) if self.manifest else 0


_FIELD_NAMES = frozenset(f.name for f in fields(JobState))


class JobStateBroadcaster:
    """Holds the live state of a run and pushes every change to subscribers.

    Stages must go through ``update`` / ``add_log`` / ``fail``; the snapshot
    returned by ``state`` is read-only.
    """

    def __init__(self, job_id: Optional[str] = None):
        self.job_id = job_id
        self._state = JobState()
        self._subscribers: List[Subscriber] = []

    @property
    def state(self) -> JobState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def reset(self) -> None:
        """Clear every field back to its initial value and notify."""
        self._commit(JobState())

    def update(self, **changes: Any) -> JobState:
        """Shallow-merge ``changes`` into the state and notify.

        Raises:
            ValueError: If a key is not a ``JobState`` field.
        """
        unknown = set(changes) - _FIELD_NAMES
        if unknown:
            raise ValueError(f"Unknown job state field(s): {', '.join(sorted(unknown))}")

        if "status" in changes:
            changes["status"] = JobStatus(changes["status"])
        if "logs" in changes:
            changes["logs"] = tuple(changes["logs"])
        if changes.get("manifest") is not None:
            changes["manifest"] = changes["manifest"].model_copy(deep=True)

        new_state = replace(self._state, **changes)

        # Keep the manifest's own status field a mirror of the live status
        if new_state.manifest is not None and ("manifest" in changes or "status" in changes):
            mirrored = manifest_status_for(new_state.status)
            if new_state.manifest.status != mirrored:
                new_state = replace(
                    new_state,
                    manifest=new_state.manifest.model_copy(update={"status": mirrored}),
                )

        return self._commit(new_state)

    def add_log(self, line: str) -> JobState:
        """Append a progress line (also emitted through the logger)."""
        logger.info(line)
        return self._commit(replace(self._state, logs=self._state.logs + (line,)))

    def fail(self, message: str) -> JobState:
        """Move to ``FAILED`` with ``message`` recorded as error and log line."""
        logger.error(f"Run failed: {message}")
        return self.update(
            status=JobStatus.FAILED,
            error=message,
            logs=self._state.logs + (f"❌ {message}",),
        )

    def _commit(self, new_state: JobState) -> JobState:
        self._state = new_state
        for callback in list(self._subscribers):
            try:
                callback(new_state)
            except Exception:
                logger.error("Job state subscriber raised", exc_info=True)
        return new_state


__all__ = ["JobState", "JobStateBroadcaster", "Subscriber"]
