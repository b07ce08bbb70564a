"""Shared fixtures for robostate tests."""

from datetime import datetime, timedelta, timezone

import pytest

from shared.schemas import (
    EStopState,
    EStopStatus,
    HardwareConfiguration,
    Link,
    ObjModel,
    PowerState,
    RobotState,
    Severity,
    Skeleton,
    SystemFault,
    MotorPowerState,
    ShorePowerState,
)

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


def make_fault(
    uid: int,
    severity: Severity = Severity.WARN,
    attributes: tuple[str, ...] = (),
    onset: datetime = T0,
    name: str | None = None,
) -> SystemFault:
    return SystemFault(
        name=name or f"fault-{uid}",
        onset_timestamp=onset,
        code=100 + uid,
        uid=uid,
        error_message="test fault",
        attributes=attributes,
        severity=severity,
    )


@pytest.fixture
def clock():
    """Clock starting at T0."""
    return FakeClock()


@pytest.fixture
def robot_state():
    """Robot state with motors on and both estops released."""
    return RobotState(
        power_state=PowerState(
            timestamp=T0,
            motor_power_state=MotorPowerState.ON,
            shore_power_state=ShorePowerState.OFF_SHORE,
        ),
        estop_states=(
            EStopState(timestamp=T0, name="hardware", state=EStopStatus.NOT_ESTOPPED),
            EStopState(timestamp=T0, name="software", state=EStopStatus.NOT_ESTOPPED),
        ),
    )


@pytest.fixture
def hardware_configuration():
    """Skeleton with one inline mesh and one link without a mesh."""
    return HardwareConfiguration(
        skeleton=Skeleton(
            links=(
                Link(
                    name="body",
                    obj_model=ObjModel(file_name="body.obj", file_contents="o body\n"),
                ),
                Link(name="fl.uleg"),
            ),
            urdf="<robot name='test'/>",
        )
    )
