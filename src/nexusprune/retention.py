"""Retention driver: keep the latest release, delete the rest.

Groups are processed one at a time, in the order given. For each group the
driver searches Nexus, echoes every hit to standard output, and then walks the
hits deciding which to keep and which to delete. Two guards bound the damage a
single run can do:

* the expected-count guard stops the run before any delete when a search
  returns more hits than expected (a wildcard that matched too much), and
* the throttle stops the run once the configured number of deletes has been
  performed, across all groups.

Backend faults raised by the repository collaborator end the run with a
``FAILED`` outcome; nothing is retried.
"""

from __future__ import annotations

import enum
import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Protocol, TextIO

from .client import DeleteOutcome, NexusError, SearchResult
from .config import RetentionSettings
from .coordinates import Gav
from .stats import arithmetic_mean, median

logger = logging.getLogger(__name__)

TRUNCATED_ADVISORY = "Truncated batch, consider re-running"


class ArtifactRepository(Protocol):
    """Search and delete operations the driver relies on."""

    def search(self, query: Gav, count: int) -> SearchResult:
        """Return the hits for ``query``, at most ``count`` of them."""

    def delete(self, gav: Gav) -> DeleteOutcome:
        """Remove the version directory of ``gav``."""


class RunOutcome(enum.Enum):
    COMPLETED = "completed"
    THROTTLED = "throttled"
    EXPECTATION_EXCEEDED = "expectation_exceeded"
    FAILED = "failed"

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self]


_EXIT_CODES = {
    RunOutcome.COMPLETED: 0,
    RunOutcome.THROTTLED: 0,
    RunOutcome.EXPECTATION_EXCEEDED: 1,
    RunOutcome.FAILED: 2,
}


@dataclass(slots=True)
class RunState:
    """Mutable bookkeeping for one run."""

    actions: int = 0
    latencies_ms: List[int] = field(default_factory=list)
    truncated: bool = False

    def record_deletion(self, elapsed_ms: int) -> None:
        self.actions += 1
        self.latencies_ms.append(elapsed_ms)


@dataclass(frozen=True, slots=True)
class RunReport:
    outcome: RunOutcome
    state: RunState
    groups_processed: int
    error: str | None = None

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code


class RetentionDriver:
    """Apply the retention policy to a list of groups."""

    def __init__(
        self,
        repository: ArtifactRepository,
        settings: RetentionSettings,
        *,
        out: TextIO | None = None,
        err: TextIO | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._repository = repository
        self._settings = settings
        self._out = out
        self._err = err
        self._clock = clock

    def run(self, groups: Iterable[str]) -> RunReport:
        state = RunState()
        processed = 0
        outcome = RunOutcome.COMPLETED
        error: str | None = None
        try:
            for group in groups:
                stop = self._process_group(group, state)
                if stop is not None:
                    outcome = stop
                    break
                processed += 1
        except NexusError as exc:
            logger.error("aborting run: %s (%s)", exc, exc.url)
            outcome = RunOutcome.FAILED
            error = str(exc)

        if state.truncated:
            logger.warning(TRUNCATED_ADVISORY)
        return RunReport(outcome=outcome, state=state, groups_processed=processed, error=error)

    def _process_group(self, group: str, state: RunState) -> RunOutcome | None:
        settings = self._settings
        query = Gav(group_id=group, artifact_id=settings.artifact, version=settings.version)
        logger.info("processing %s", query)

        found = self._repository.search(query, settings.count)
        hits = len(found.artifacts)
        out = self._out or sys.stdout
        for artifact in found.artifacts:
            print(artifact.concise_notation(), file=out)
        logger.info("search returned %d artifacts out of %d", hits, found.total_count)

        if hits > settings.expect:
            print(
                f"Found {hits} artifacts but expect is {settings.expect}, aborting",
                file=self._err or sys.stderr,
            )
            return RunOutcome.EXPECTATION_EXCEEDED

        for artifact in found.artifacts:
            if settings.keep_latest and artifact.is_latest_release:
                logger.info(
                    "keeping latest version %s for %s",
                    artifact.latest_release,
                    artifact.concise_notation(),
                )
                continue
            if state.actions >= settings.throttle:
                logger.info("throttle=%d reached, exiting", settings.throttle)
                return RunOutcome.THROTTLED
            if not settings.delete:
                logger.info("dry run, would delete %s", artifact.concise_notation())
                continue
            self._delete(artifact, state)

        if found.is_truncated:
            state.truncated = True
        return None

    def _delete(self, artifact: Gav, state: RunState) -> None:
        started = self._clock()
        if self._repository.delete(artifact) is not DeleteOutcome.DELETED:
            return
        elapsed_ms = int((self._clock() - started) * 1000)
        state.record_deletion(elapsed_ms)
        logger.info(
            "[PERF] %d ms, average: %d ms, median: %d ms",
            elapsed_ms,
            arithmetic_mean(state.latencies_ms),
            median(state.latencies_ms),
        )


__all__ = [
    "ArtifactRepository",
    "RetentionDriver",
    "RunOutcome",
    "RunReport",
    "RunState",
    "TRUNCATED_ADVISORY",
]
