"""System fault aggregation and historical retention.

Faults are ACTIVE until the producer reports them cleared, then HISTORICAL
until the retention window has elapsed since clearing. Pruning runs on every
snapshot refresh; there is no background timer.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

import structlog

from shared.schemas import Severity, SystemFault, SystemFaultState

logger = structlog.get_logger()

HISTORICAL_RETENTION = timedelta(minutes=10)


def aggregate_severities(faults: Iterable[SystemFault]) -> dict[str, Severity]:
    """Compute the highest severity per attribute across faults.

    Args:
        faults: Active faults

    Returns:
        Mapping of attribute to the maximum severity of faults carrying it.
        Faults without attributes contribute nothing.
    """
    aggregated: dict[str, Severity] = {}
    for fault in faults:
        for attribute in fault.attributes:
            current = aggregated.get(attribute, Severity.UNKNOWN)
            aggregated[attribute] = max(current, fault.severity)
    return aggregated


def clearance_time(fault: SystemFault) -> datetime:
    """Time a historical fault was cleared."""
    return fault.onset_timestamp + fault.duration


def _require_aware(value: datetime, field: str) -> None:
    if value.utcoffset() is None:
        raise ValueError(f"{field} must be timezone-aware, got {value.isoformat()}")


class FaultAggregator:
    """Tracks active and historical system faults.

    Not thread-safe on its own; the state store serializes access.
    """

    def __init__(self, retention: timedelta = HISTORICAL_RETENTION) -> None:
        """Initialize the aggregator.

        Args:
            retention: How long a cleared fault stays in the historical list
        """
        self._retention = retention
        self._active: dict[int, SystemFault] = {}
        self._historical: list[SystemFault] = []

    @property
    def retention(self) -> timedelta:
        return self._retention

    def raise_fault(self, fault: SystemFault) -> None:
        """Add an active fault, replacing any active fault with the same uid.

        Raises:
            ValueError: If the onset timestamp is naive
        """
        _require_aware(fault.onset_timestamp, "onset_timestamp")
        is_new = fault.uid not in self._active
        self._active[fault.uid] = fault
        if is_new:
            logger.info(
                "fault_raised",
                uid=fault.uid,
                name=fault.name,
                severity=fault.severity.name,
                attributes=list(fault.attributes),
            )

    def clear_fault(self, uid: int, cleared_at: datetime) -> bool:
        """Move an active fault to the historical list.

        Args:
            uid: Fault uid
            cleared_at: Time the fault was observed cleared

        Returns:
            True if the fault was active

        Raises:
            ValueError: If cleared_at is naive; the fault stays active
        """
        _require_aware(cleared_at, "cleared_at")
        fault = self._active.get(uid)
        if fault is None:
            logger.warning("fault_clear_unknown", uid=uid)
            return False

        duration = max(cleared_at - fault.onset_timestamp, timedelta(0))
        del self._active[uid]
        self._historical.append(fault.model_copy(update={"duration": duration}))
        logger.info("fault_cleared", uid=uid, name=fault.name, duration_s=duration.total_seconds())
        return True

    def load(self, state: SystemFaultState) -> None:
        """Replace tracked faults with a producer-published fault state."""
        self._active = {fault.uid: fault for fault in state.faults}
        self._historical = list(state.historical_faults)

    def prune(self, now: datetime) -> int:
        """Drop historical faults cleared more than the retention window ago.

        Returns:
            Number of faults dropped
        """
        kept = [f for f in self._historical if now - clearance_time(f) <= self._retention]
        dropped = len(self._historical) - len(kept)
        if dropped:
            logger.debug("historical_faults_pruned", count=dropped)
        self._historical = kept
        return dropped

    def snapshot(self, now: datetime) -> SystemFaultState:
        """Prune and build the current fault state.

        Active fault durations are refreshed to the time elapsed since onset.
        """
        self.prune(now)
        active = tuple(
            fault.model_copy(
                update={"duration": max(now - fault.onset_timestamp, timedelta(0))}
            )
            for fault in self._active.values()
        )
        return SystemFaultState(
            faults=active,
            historical_faults=tuple(self._historical),
            aggregated=aggregate_severities(active),
        )

    @property
    def active_count(self) -> int:
        return len(self._active)

    @property
    def historical_count(self) -> int:
        return len(self._historical)
