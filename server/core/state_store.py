"""Latest-snapshot store for robot state.

Producers publish state, metrics, hardware configuration and fault
transitions; each publish swaps in a new immutable StateSnapshot. Readers
take the current reference without locking, so a response built from one
snapshot never mixes two publish cycles.
"""

import threading
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict

from shared.schemas import HardwareConfiguration, RobotMetrics, RobotState, SystemFault
from shared.schemas.messages import utcnow

from .errors import UnavailableError
from .fault_aggregator import HISTORICAL_RETENTION, FaultAggregator

logger = structlog.get_logger()

_UNSET: Any = object()


class StateSnapshot(BaseModel):
    """Everything published as of one publish cycle.

    Attributes:
        sequence: Publish counter, starting at 1
        published_at: Server clock at publish time
        robot_state: Latest robot state, fault state refreshed for this cycle
        robot_metrics: Latest robot metrics
        hardware_configuration: Latest hardware configuration
    """

    model_config = ConfigDict(frozen=True)

    sequence: int
    published_at: datetime
    robot_state: RobotState | None = None
    robot_metrics: RobotMetrics | None = None
    hardware_configuration: HardwareConfiguration | None = None


class StateStore:
    """Single publish point for robot state.

    Writers serialize on one lock; readers never block.
    """

    def __init__(
        self,
        fault_retention: timedelta = HISTORICAL_RETENTION,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the store.

        Args:
            fault_retention: How long cleared faults stay in the historical list
            clock: Source of the current time
        """
        self._clock = clock
        self._faults = FaultAggregator(fault_retention)
        self._snapshot: StateSnapshot | None = None
        self._sequence = 0
        self._lock = threading.Lock()
        self._on_publish: list[Callable[[StateSnapshot], Any]] = []

    def on_publish(self, callback: Callable[[StateSnapshot], Any]) -> None:
        """Register callback invoked with each new snapshot."""
        self._on_publish.append(callback)

    def snapshot(self) -> StateSnapshot:
        """Get the latest snapshot.

        Raises:
            UnavailableError: If nothing has been published yet
        """
        snapshot = self._snapshot
        if snapshot is None:
            raise UnavailableError("no robot state has been published yet")
        return snapshot

    @property
    def has_snapshot(self) -> bool:
        return self._snapshot is not None

    @property
    def faults(self) -> FaultAggregator:
        return self._faults

    def publish_state(self, state: RobotState) -> StateSnapshot:
        """Publish a new robot state.

        A fault state carried by the robot state replaces the tracked faults;
        the published fault state is always rebuilt by the aggregator.
        """
        with self._lock:
            if state.system_fault_state is not None:
                self._faults.load(state.system_fault_state)
            snapshot = self._swap(robot_state=state)
        self._notify(snapshot)
        return snapshot

    def publish_metrics(self, metrics: RobotMetrics) -> StateSnapshot:
        """Publish new robot metrics."""
        with self._lock:
            snapshot = self._swap(robot_metrics=metrics)
        self._notify(snapshot)
        return snapshot

    def publish_hardware_configuration(self, config: HardwareConfiguration) -> StateSnapshot:
        """Publish a new hardware configuration."""
        with self._lock:
            snapshot = self._swap(hardware_configuration=config)
        self._notify(snapshot)
        return snapshot

    def report_fault(self, fault: SystemFault) -> StateSnapshot:
        """Record an active fault and republish.

        Raises:
            ValueError: If the onset timestamp is naive; nothing is recorded
        """
        with self._lock:
            self._faults.raise_fault(fault)
            snapshot = self._swap()
        self._notify(snapshot)
        return snapshot

    def clear_fault(self, uid: int, cleared_at: datetime | None = None) -> bool:
        """Move an active fault to the historical list and republish.

        Args:
            uid: Fault uid
            cleared_at: Time the fault cleared, defaults to now

        Returns:
            True if the fault was active

        Raises:
            ValueError: If cleared_at is naive; the fault stays active
        """
        with self._lock:
            cleared = self._faults.clear_fault(uid, cleared_at or self._clock())
            if not cleared:
                return False
            snapshot = self._swap()
        self._notify(snapshot)
        return True

    def refresh(self) -> StateSnapshot:
        """Republish the current data, pruning expired historical faults."""
        with self._lock:
            snapshot = self._swap()
        self._notify(snapshot)
        return snapshot

    def _swap(
        self,
        robot_state: RobotState | None = _UNSET,
        robot_metrics: RobotMetrics | None = _UNSET,
        hardware_configuration: HardwareConfiguration | None = _UNSET,
    ) -> StateSnapshot:
        """Build the next snapshot and make it current. Caller holds the lock."""
        now = self._clock()
        previous = self._snapshot

        if robot_state is _UNSET:
            robot_state = previous.robot_state if previous else None
        if robot_metrics is _UNSET:
            robot_metrics = previous.robot_metrics if previous else None
        if hardware_configuration is _UNSET:
            hardware_configuration = previous.hardware_configuration if previous else None

        if robot_state is not None:
            robot_state = robot_state.model_copy(
                update={"system_fault_state": self._faults.snapshot(now)}
            )

        self._sequence += 1
        snapshot = StateSnapshot(
            sequence=self._sequence,
            published_at=now,
            robot_state=robot_state,
            robot_metrics=robot_metrics,
            hardware_configuration=hardware_configuration,
        )
        self._snapshot = snapshot
        logger.debug("snapshot_published", sequence=snapshot.sequence)
        return snapshot

    def _notify(self, snapshot: StateSnapshot) -> None:
        # Called outside the lock
        for callback in self._on_publish:
            try:
                callback(snapshot)
            except Exception as e:
                logger.error("publish_callback_error", error=str(e))
