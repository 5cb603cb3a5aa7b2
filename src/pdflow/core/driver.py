"""Processing Driver: sequences resource-session calls across a BatchSequence.

State machine::

    CREATED -> ACQUIRED -> LOADED -> SOLVED -> LOADED ... -> RELEASED
                  \\           \\         \\
                   +-----------+---------+--> FAILED -> RELEASED

Every run that reaches ACQUIRED releases the session exactly once, on every
exit path, before control returns to the caller.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, TypeVar

from .contracts import BatchSequence, FrameOutcome, FramePair, OutcomeStatus, RunReport
from .enumerator import MIN_FRAMES
from .errors import (
    EngineInitFailure,
    FrameLoadFailure,
    InsufficientFrames,
    ProcessingFailure,
    SolveFailure,
)
from .session import ResourceSession, ResultSink

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DriverState(str, Enum):
    CREATED = "created"
    ACQUIRED = "acquired"
    LOADED = "loaded"
    SOLVED = "solved"
    FAILED = "failed"
    RELEASED = "released"


class ProcessingDriver:
    """Owns one resource session for exactly one run."""

    name = "driver"

    def __init__(self, session: ResourceSession, sink: ResultSink):
        self.session = session
        self.sink = sink
        self.state = DriverState.CREATED
        self.history: list[DriverState] = [DriverState.CREATED]
        self.cursor = 0
        self.report = RunReport()
        self._used = False

    def run(self, batch: BatchSequence) -> RunReport:
        """Process every transition of ``batch`` in order.

        Raises EngineInitFailure if the session cannot be acquired. Load and
        solve failures abort the remaining transitions and are re-raised
        after the session has been released, with the partial report attached.
        """
        if self._used:
            raise RuntimeError("ProcessingDriver is single-use; create a new one per run")
        self._used = True

        if batch.length < MIN_FRAMES:
            raise InsufficientFrames(None, batch.length, MIN_FRAMES)

        pairs = batch.pairs()
        self.report = RunReport(source=batch.source, total_transitions=batch.num_transitions)
        t0 = time.time()

        self._acquire()
        failure: BaseException | None = None
        try:
            self._drive(pairs)
        except ProcessingFailure as e:
            failure = e
            self._transition(DriverState.FAILED)
            self.report.failure = f"{type(e).__name__}: {e}"
            e.report = self.report
            raise
        except BaseException as e:
            failure = e
            self._transition(DriverState.FAILED)
            self.report.failure = f"{type(e).__name__}: {e}"
            raise
        finally:
            self._release(failure)
            self.report.elapsed_seconds = time.time() - t0

        logger.info(
            f"[{self.name}] Done: {self.report.transitions}/{self.report.total_transitions} "
            f"transitions in {self.report.elapsed_seconds:.1f}s"
        )
        return self.report

    # -- transitions -------------------------------------------------------

    def _transition(self, new_state: DriverState) -> None:
        logger.debug(f"[{self.name}] {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    def _acquire(self) -> None:
        logger.info(f"[{self.name}] Acquiring resource session...")
        try:
            self.session.acquire()
        except EngineInitFailure:
            raise
        except Exception as e:
            raise EngineInitFailure(f"Resource session acquisition failed: {e}") from e
        self.report.acquired = True
        self._transition(DriverState.ACQUIRED)

    def _release(self, failure: BaseException | None = None) -> None:
        """Release the session once. A release error never replaces ``failure``."""
        if self.state == DriverState.RELEASED:
            return
        logger.info(f"[{self.name}] Releasing resource session")
        try:
            self.session.release()
            self.report.released = True
        except Exception as e:
            self.report.release_error = f"{type(e).__name__}: {e}"
            if failure is None:
                raise
            logger.error(
                f"[{self.name}] Release failed while handling {type(failure).__name__}: {e}"
            )
        finally:
            self._transition(DriverState.RELEASED)

    def _drive(self, pairs: list[FramePair]) -> None:
        total = len(pairs) - 1

        self._load(1, pairs[1], self.session.load_initial, pairs[0], pairs[1])
        self.cursor = 1

        while True:
            self._process(pairs[self.cursor - 1], pairs[self.cursor], total)
            if self.cursor + 1 >= len(pairs):
                break
            self.cursor += 1
            self._load(self.cursor, pairs[self.cursor], self.session.advance, pairs[self.cursor])

    def _load(self, index: int, pair: FramePair, load: Callable[..., None], *args: FramePair) -> None:
        self._outcome(index, pair, OutcomeStatus.LOAD_FAILED)
        for p in args:
            missing = p.missing()
            if missing:
                raise FrameLoadFailure(
                    f"Frame not found: {', '.join(str(m) for m in missing)}", frame_index=index
                )
        self._call(FrameLoadFailure, index, "frame load", load, *args)
        self.report.outcomes.pop()
        self._transition(DriverState.LOADED)

    def _process(self, first: FramePair, second: FramePair, total: int) -> None:
        index = self.cursor
        t0 = time.time()
        outcome = self._outcome(index, second, OutcomeStatus.SOLVE_FAILED)
        logger.info(
            f"[{self.name}] Transition {index}/{total}: "
            f"{first.intensity.name} -> {second.intensity.name}"
        )

        self._call(SolveFailure, index, "solve", self.session.solve)
        artifact = self._call(
            SolveFailure, index, "artifact production", self.session.produce_artifact, index
        )
        self._transition(DriverState.SOLVED)

        # the interactive sink blocks here until acknowledged
        outcome.status = OutcomeStatus.SINK_FAILED
        outcome.outputs = self.sink.emit(artifact)
        outcome.status = OutcomeStatus.SOLVED
        outcome.elapsed_seconds = time.time() - t0
        logger.info(f"[{self.name}] Transition {index} done in {outcome.elapsed_seconds:.2f}s")

    def _outcome(self, index: int, pair: FramePair, status: OutcomeStatus) -> FrameOutcome:
        outcome = FrameOutcome(index=index, intensity=pair.intensity, depth=pair.depth, status=status)
        self.report.outcomes.append(outcome)
        return outcome

    def _call(
        self,
        failure_cls: type[ProcessingFailure],
        index: int,
        what: str,
        fn: Callable[..., T],
        *args,
    ) -> T:
        """Invoke a session operation, classifying collaborator errors."""
        try:
            return fn(*args)
        except ProcessingFailure as e:
            if e.frame_index is None:
                e.frame_index = index
            raise
        except Exception as e:
            raise failure_cls(f"{what} failed at transition {index}: {e}", frame_index=index) from e
