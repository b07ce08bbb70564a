"""Robot state snapshot schemas.

A RobotState aggregates independently timestamped subsystem readings
(power, batteries, comms, faults, e-stops, kinematics, behavior faults)
into one immutable snapshot. Enum numbers are part of the wire contract.
"""

from collections.abc import Mapping
from datetime import timedelta
from types import MappingProxyType
from typing import Any

from pydantic import AwareDatetime, Field, field_serializer, field_validator, model_validator

from .geometry import Plane, SE3Pose, SE3Velocity
from .messages import MessageBase, WireEnum, select_variant


class MotorPowerState(WireEnum):
    """Motor power state. Only OFF is safe to approach."""

    UNKNOWN = 0
    OFF = 1
    ON = 2
    POWERING_ON = 3
    POWERING_OFF = 4
    ERROR = 5


class ShorePowerState(WireEnum):
    """Whether the robot is connected to wall power."""

    UNKNOWN = 0
    ON_SHORE = 1
    OFF_SHORE = 2


class BatteryStatus(WireEnum):
    UNKNOWN = 0
    MISSING = 1
    CHARGING = 2
    DISCHARGING = 3
    BOOTING = 4


class WiFiMode(WireEnum):
    UNKNOWN = 0
    ACCESS_POINT = 1
    CLIENT = 2


class Severity(WireEnum):
    """Fault severity. Ordered: UNKNOWN < INFO < WARN < CRITICAL."""

    UNKNOWN = 0
    INFO = 1
    WARN = 2
    CRITICAL = 3


class EStopType(WireEnum):
    UNKNOWN = 0
    HARDWARE = 1
    SOFTWARE = 2


class EStopStatus(WireEnum):
    UNKNOWN = 0
    ESTOPPED = 1
    NOT_ESTOPPED = 2


class BehaviorFaultCause(WireEnum):
    UNKNOWN = 0
    FALL = 1
    HARDWARE = 2


class BehaviorFaultStatus(WireEnum):
    UNKNOWN = 0
    CLEARABLE = 1
    UNCLEARABLE = 2


class PowerState(MessageBase):
    """Motor and shore power readings.

    Attributes:
        timestamp: Robot clock time of the reading
        motor_power_state: Motor power state
        shore_power_state: Shore power connection state
    """

    timestamp: AwareDatetime | None = None
    motor_power_state: MotorPowerState = MotorPowerState.UNKNOWN
    shore_power_state: ShorePowerState = ShorePowerState.UNKNOWN

    @model_validator(mode="after")
    def _check_shore_power(self) -> "PowerState":
        if (
            self.motor_power_state == MotorPowerState.ON
            and self.shore_power_state == ShorePowerState.ON_SHORE
        ):
            raise ValueError("motors cannot be ON while connected to shore power")
        return self

    def is_safe_to_approach(self) -> bool:
        """Check if motors are off."""
        return self.motor_power_state == MotorPowerState.OFF


class BatteryState(MessageBase):
    """State of one battery.

    Unset readings are None; 0.0 is a valid reading.

    Attributes:
        timestamp: Robot clock time of the reading
        identifier: Battery serial number or name
        charge_percentage: Estimated state of charge (0-100)
        estimated_runtime: Estimated remaining runtime
        current: Current in Amps, positive when charging
        voltage: Pack voltage in Volts
        temperatures: Temperatures in Celsius across the pack
        status: Battery status
    """

    timestamp: AwareDatetime | None = None
    identifier: str = ""
    charge_percentage: float | None = Field(default=None, ge=0.0, le=100.0)
    estimated_runtime: timedelta | None = None
    current: float | None = None
    voltage: float | None = None
    temperatures: tuple[float, ...] = ()
    status: BatteryStatus = BatteryStatus.UNKNOWN


class WiFiState(MessageBase):
    """WiFi comms payload.

    Attributes:
        current_mode: Access point or client mode
        essid: ESSID of the robot's network (AP mode) or the joined network
    """

    current_mode: WiFiMode = WiFiMode.UNKNOWN
    essid: str = ""


# Union of comms payload types; add new variants here and to _COMMS_VARIANTS.
CommsPayload = WiFiState

_COMMS_VARIANTS: dict[str, type[MessageBase]] = {
    "wifi_state": WiFiState,
}


class CommsState(MessageBase):
    """Comms reading carrying exactly one payload variant.

    Construct with the variant's wire name, e.g. ``CommsState(wifi_state=...)``,
    or with ``state=`` directly.
    """

    timestamp: AwareDatetime | None = None
    state: CommsPayload

    @model_validator(mode="before")
    @classmethod
    def _one_variant(cls, data: Any) -> Any:
        data, _, _ = select_variant(data, _COMMS_VARIANTS, "state", "CommsState")
        return data

    @property
    def variant(self) -> str:
        """Wire name of the payload variant."""
        for name, payload_type in _COMMS_VARIANTS.items():
            if isinstance(self.state, payload_type):
                return name
        raise TypeError(f"unregistered comms payload {type(self.state).__name__}")

    @property
    def wifi_state(self) -> WiFiState | None:
        return self.state if isinstance(self.state, WiFiState) else None


class SystemFault(MessageBase):
    """A hardware or software fault on the robot.

    Attributes:
        name: Fault name
        onset_timestamp: Robot clock time at fault onset
        duration: Time elapsed since onset (until clearing, for historical faults)
        code: Vendor-specific error code, may repeat across units
        uid: Unique id for the lifetime of the fault
        error_message: User visible description and possible remedies
        attributes: Categories affected, e.g. "robot", "imu", "vision", "battery"
        severity: Fault severity
    """

    name: str
    onset_timestamp: AwareDatetime
    duration: timedelta = timedelta(0)
    code: int = Field(default=0, ge=-(2**31), le=2**31 - 1)
    uid: int = Field(ge=0, le=2**64 - 1)
    error_message: str = ""
    attributes: tuple[str, ...] = ()
    severity: Severity = Severity.UNKNOWN


class SystemFaultState(MessageBase):
    """Active and recently cleared faults.

    Attributes:
        faults: Currently active faults
        historical_faults: Faults cleared within the retention window
        aggregated: Highest active severity per fault attribute
    """

    faults: tuple[SystemFault, ...] = ()
    historical_faults: tuple[SystemFault, ...] = ()
    aggregated: Mapping[str, Severity] = Field(default_factory=dict, validate_default=True)

    @field_validator("aggregated")
    @classmethod
    def _freeze_aggregated(cls, value: Mapping[str, Severity]) -> Mapping[str, Severity]:
        return MappingProxyType(dict(value))

    @field_serializer("aggregated")
    def _dump_aggregated(self, value: Mapping[str, Severity]) -> dict[str, Severity]:
        return dict(value)

    def severity_of(self, attribute: str) -> Severity:
        """Highest active severity for an attribute, UNKNOWN if none."""
        return self.aggregated.get(attribute, Severity.UNKNOWN)


class EStopState(MessageBase):
    """State of one emergency stop.

    Attributes:
        timestamp: Robot clock time of the reading
        name: EStop name
        type: Hardware button or software process
        state: Whether this estop is engaged
        state_description: Optional status description
    """

    timestamp: AwareDatetime | None = None
    name: str = ""
    type: EStopType = EStopType.UNKNOWN
    state: EStopStatus = EStopStatus.UNKNOWN
    state_description: str = ""


class JointState(MessageBase):
    """State of one joint. Name matches the URDF joint name."""

    name: str
    position: float | None = None
    velocity: float | None = None
    acceleration: float | None = None
    load: float | None = None


class KinematicState(MessageBase):
    """Joint states and body pose/velocity.

    Attributes:
        timestamp: Robot clock time of the reading
        joint_states: All robot joints
        ko_tform_body: Body pose in the kinematic odometry frame
        body_twist_rt_ko: Body velocity in the kinematic odometry frame
        ground_plane_rt_ko: Ground plane estimate in the kinematic odometry frame
        vo_tform_body: Body pose in the vision odometry frame
    """

    timestamp: AwareDatetime | None = None
    joint_states: tuple[JointState, ...] = ()
    ko_tform_body: SE3Pose | None = None
    body_twist_rt_ko: SE3Velocity | None = None
    ground_plane_rt_ko: Plane | None = None
    vo_tform_body: SE3Pose | None = None

    def joint(self, name: str) -> JointState | None:
        """Get a joint state by name."""
        for joint in self.joint_states:
            if joint.name == name:
                return joint
        return None


class BehaviorFault(MessageBase):
    """Behavior-level fault that may block commands."""

    behavior_fault_id: int = Field(ge=0, le=2**32 - 1)
    onset_timestamp: AwareDatetime | None = None
    cause: BehaviorFaultCause = BehaviorFaultCause.UNKNOWN
    status: BehaviorFaultStatus = BehaviorFaultStatus.UNKNOWN


class BehaviorFaultState(MessageBase):
    faults: tuple[BehaviorFault, ...] = ()


class RobotState(MessageBase):
    """Complete robot state snapshot."""

    power_state: PowerState | None = None
    battery_states: tuple[BatteryState, ...] = ()
    comms_states: tuple[CommsState, ...] = ()
    system_fault_state: SystemFaultState | None = None
    estop_states: tuple[EStopState, ...] = ()
    kinematic_state: KinematicState | None = None
    behavior_fault_state: BehaviorFaultState | None = None

    def is_safe_to_command(self) -> bool:
        """Check that every estop reads NOT_ESTOPPED.

        A state with no estop readings is not safe to command.
        """
        if not self.estop_states:
            return False
        return all(e.state == EStopStatus.NOT_ESTOPPED for e in self.estop_states)
