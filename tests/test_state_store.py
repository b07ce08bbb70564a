"""Tests for the latest-snapshot state store."""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from server.core import StateStore, UnavailableError
from shared.schemas import (
    HardwareConfiguration,
    Parameter,
    RobotMetrics,
    Severity,
    SystemFaultState,
)

from .conftest import T0, make_fault


@pytest.fixture
def store(clock):
    return StateStore(clock=clock)


class TestSnapshot:
    """Tests for snapshot publishing."""

    def test_nothing_published(self, store):
        assert store.has_snapshot is False

        with pytest.raises(UnavailableError):
            store.snapshot()

    def test_publish_state(self, store, robot_state):
        snapshot = store.publish_state(robot_state)

        assert snapshot.sequence == 1
        assert snapshot.published_at == T0
        assert store.snapshot() is snapshot
        assert snapshot.robot_state.estop_states == robot_state.estop_states
        assert snapshot.robot_metrics is None

    def test_publish_keeps_other_parts(self, store, robot_state, hardware_configuration):
        store.publish_hardware_configuration(hardware_configuration)
        store.publish_state(robot_state)
        metrics = RobotMetrics(timestamp=T0, metrics=(Parameter(label="cycles", value=12),))
        snapshot = store.publish_metrics(metrics)

        assert snapshot.sequence == 3
        assert snapshot.hardware_configuration == hardware_configuration
        assert snapshot.robot_state is not None
        assert snapshot.robot_metrics.get("cycles").value == 12

    def test_old_snapshot_unchanged(self, store, robot_state):
        first = store.publish_state(robot_state)
        store.publish_hardware_configuration(HardwareConfiguration())

        assert first.hardware_configuration is None
        assert store.snapshot().sequence == 2

    def test_published_aggregation_is_read_only(self, store, robot_state):
        store.publish_state(robot_state)
        store.report_fault(make_fault(1, Severity.INFO, ("vision",)))
        aggregated = store.snapshot().robot_state.system_fault_state.aggregated

        with pytest.raises(TypeError):
            aggregated["vision"] = Severity.CRITICAL

        assert store.snapshot().robot_state.system_fault_state.aggregated == {
            "vision": Severity.INFO
        }

    def test_snapshot_fields_cannot_be_reassigned(self, store, robot_state):
        snapshot = store.publish_state(robot_state)

        with pytest.raises(ValidationError):
            snapshot.robot_state = None

        with pytest.raises(ValidationError):
            snapshot.robot_state.system_fault_state.faults = ()


class TestFaults:
    """Tests for fault tracking through the store."""

    def test_reported_fault_in_state(self, store, robot_state):
        store.publish_state(robot_state)

        store.report_fault(make_fault(1, Severity.CRITICAL, ("battery",)))
        store.report_fault(make_fault(2, Severity.INFO, ("vision",)))

        fault_state = store.snapshot().robot_state.system_fault_state
        assert [f.uid for f in fault_state.faults] == [1, 2]
        assert fault_state.aggregated == {
            "battery": Severity.CRITICAL,
            "vision": Severity.INFO,
        }

    def test_fault_reported_before_state(self, store, robot_state):
        store.report_fault(make_fault(1, Severity.WARN, ("imu",)))

        assert store.snapshot().robot_state is None

        store.publish_state(robot_state)
        assert store.snapshot().robot_state.system_fault_state.aggregated == {
            "imu": Severity.WARN
        }

    def test_clear_fault(self, store, robot_state, clock):
        store.publish_state(robot_state)
        store.report_fault(make_fault(1, Severity.CRITICAL, ("battery",)))
        clock.advance(timedelta(seconds=30))

        assert store.clear_fault(1) is True

        fault_state = store.snapshot().robot_state.system_fault_state
        assert fault_state.faults == ()
        assert fault_state.historical_faults[0].duration == timedelta(seconds=30)
        assert fault_state.aggregated == {}

    def test_clear_unknown_fault_does_not_publish(self, store, robot_state):
        store.publish_state(robot_state)

        assert store.clear_fault(99) is False
        assert store.snapshot().sequence == 1

    def test_active_duration_refreshed(self, store, robot_state, clock):
        store.publish_state(robot_state)
        store.report_fault(make_fault(1))
        clock.advance(timedelta(minutes=2))

        store.refresh()

        assert store.snapshot().robot_state.system_fault_state.faults[0].duration == timedelta(
            minutes=2
        )

    def test_refresh_prunes_historical(self, store, robot_state, clock):
        store.publish_state(robot_state)
        store.report_fault(make_fault(1))
        store.clear_fault(1, cleared_at=T0)

        clock.advance(timedelta(minutes=10))
        store.refresh()
        assert len(store.snapshot().robot_state.system_fault_state.historical_faults) == 1

        clock.advance(timedelta(seconds=1))
        store.refresh()
        assert store.snapshot().robot_state.system_fault_state.historical_faults == ()

    def test_naive_onset_leaves_store_usable(self, store, robot_state):
        store.publish_state(robot_state)
        naive = make_fault(5).model_copy(update={"onset_timestamp": datetime(2024, 5, 1, 12)})

        with pytest.raises(ValueError):
            store.report_fault(naive)

        assert store.faults.active_count == 0
        assert store.snapshot().sequence == 1

        store.refresh()
        store.publish_state(robot_state)
        store.report_fault(make_fault(6))
        assert [f.uid for f in store.snapshot().robot_state.system_fault_state.faults] == [6]

    def test_naive_clear_time_keeps_fault_active(self, store, robot_state):
        store.publish_state(robot_state)
        store.report_fault(make_fault(1))

        with pytest.raises(ValueError):
            store.clear_fault(1, cleared_at=datetime(2024, 5, 1, 12, 0, 30))

        assert store.faults.active_count == 1
        assert store.faults.historical_count == 0
        assert store.clear_fault(1, cleared_at=T0 + timedelta(seconds=30)) is True
        historical = store.snapshot().robot_state.system_fault_state.historical_faults
        assert historical[0].duration == timedelta(seconds=30)

    def test_published_fault_state_replaces_tracked(self, store, robot_state):
        store.report_fault(make_fault(1, Severity.CRITICAL, ("battery",)))
        published = robot_state.model_copy(
            update={
                "system_fault_state": SystemFaultState(
                    faults=(make_fault(7, Severity.WARN, ("vision",)),),
                )
            }
        )

        store.publish_state(published)

        fault_state = store.snapshot().robot_state.system_fault_state
        assert [f.uid for f in fault_state.faults] == [7]
        assert fault_state.aggregated == {"vision": Severity.WARN}
        assert store.faults.active_count == 1


class TestCallbacks:
    """Tests for publish callbacks."""

    def test_callback_receives_snapshot(self, store, robot_state):
        seen = []
        store.on_publish(seen.append)

        snapshot = store.publish_state(robot_state)

        assert seen == [snapshot]

    def test_callback_error_does_not_fail_publish(self, store, robot_state):
        def broken(snapshot):
            raise RuntimeError("boom")

        seen = []
        store.on_publish(broken)
        store.on_publish(seen.append)

        snapshot = store.publish_state(robot_state)

        assert store.snapshot() is snapshot
        assert seen == [snapshot]
