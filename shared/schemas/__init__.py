"""Message schemas for robostate."""

from .geometry import Plane, Quaternion, SE3Pose, SE3Velocity, Vec3
from .hardware import HardwareConfiguration, Link, ObjModel, Skeleton
from .messages import (
    CommonError,
    ErrorCode,
    MessageBase,
    RequestHeader,
    ResponseHeader,
    WireEnum,
)
from .metrics import Parameter, ParameterKind, RobotMetrics
from .robot_state import (
    BatteryState,
    BatteryStatus,
    BehaviorFault,
    BehaviorFaultCause,
    BehaviorFaultState,
    BehaviorFaultStatus,
    CommsState,
    EStopState,
    EStopStatus,
    EStopType,
    JointState,
    KinematicState,
    MotorPowerState,
    PowerState,
    RobotState,
    Severity,
    ShorePowerState,
    SystemFault,
    SystemFaultState,
    WiFiMode,
    WiFiState,
)
from .service import (
    ErrorResponse,
    RobotHardwareConfigurationRequest,
    RobotHardwareConfigurationResponse,
    RobotLinkModelRequest,
    RobotLinkModelResponse,
    RobotMetricsRequest,
    RobotMetricsResponse,
    RobotStateRequest,
    RobotStateResponse,
)

__all__ = [
    # Wire primitives
    "MessageBase",
    "WireEnum",
    "ErrorCode",
    "CommonError",
    "RequestHeader",
    "ResponseHeader",
    # Geometry
    "Vec3",
    "Quaternion",
    "SE3Pose",
    "SE3Velocity",
    "Plane",
    # Robot state
    "RobotState",
    "PowerState",
    "MotorPowerState",
    "ShorePowerState",
    "BatteryState",
    "BatteryStatus",
    "CommsState",
    "WiFiState",
    "WiFiMode",
    "SystemFault",
    "SystemFaultState",
    "Severity",
    "EStopState",
    "EStopType",
    "EStopStatus",
    "JointState",
    "KinematicState",
    "BehaviorFault",
    "BehaviorFaultState",
    "BehaviorFaultCause",
    "BehaviorFaultStatus",
    # Hardware
    "HardwareConfiguration",
    "Skeleton",
    "Link",
    "ObjModel",
    # Metrics
    "RobotMetrics",
    "Parameter",
    "ParameterKind",
    # Service envelopes
    "RobotStateRequest",
    "RobotStateResponse",
    "RobotMetricsRequest",
    "RobotMetricsResponse",
    "RobotHardwareConfigurationRequest",
    "RobotHardwareConfigurationResponse",
    "RobotLinkModelRequest",
    "RobotLinkModelResponse",
    "ErrorResponse",
]
