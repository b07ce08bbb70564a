"""Request/response envelopes for the robot state service.

Every response payload is None when its header carries an error.
"""

from pydantic import Field

from .hardware import HardwareConfiguration, ObjModel
from .messages import MessageBase, RequestHeader, ResponseHeader
from .metrics import RobotMetrics
from .robot_state import RobotState


class RobotStateRequest(MessageBase):
    header: RequestHeader = Field(default_factory=RequestHeader)


class RobotStateResponse(MessageBase):
    header: ResponseHeader = Field(default_factory=ResponseHeader)
    robot_state: RobotState | None = None


class RobotMetricsRequest(MessageBase):
    header: RequestHeader = Field(default_factory=RequestHeader)


class RobotMetricsResponse(MessageBase):
    header: ResponseHeader = Field(default_factory=ResponseHeader)
    robot_metrics: RobotMetrics | None = None


class RobotHardwareConfigurationRequest(MessageBase):
    header: RequestHeader = Field(default_factory=RequestHeader)


class RobotHardwareConfigurationResponse(MessageBase):
    header: ResponseHeader = Field(default_factory=ResponseHeader)
    hardware_configuration: HardwareConfiguration | None = None


class RobotLinkModelRequest(MessageBase):
    header: RequestHeader = Field(default_factory=RequestHeader)
    link_name: str = ""


class RobotLinkModelResponse(MessageBase):
    header: ResponseHeader = Field(default_factory=ResponseHeader)
    link_model: ObjModel | None = None


class ErrorResponse(MessageBase):
    """Header-only response for requests that matched no operation."""

    header: ResponseHeader = Field(default_factory=ResponseHeader)
