"""Robot state request service.

Answers the four read-only queries against the latest published snapshot.
Failures are reported in the response header with no payload.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

import msgpack
import structlog

from shared.schemas import (
    CommonError,
    ErrorCode,
    ErrorResponse,
    HardwareConfiguration,
    MessageBase,
    RequestHeader,
    ResponseHeader,
    RobotHardwareConfigurationRequest,
    RobotHardwareConfigurationResponse,
    RobotLinkModelRequest,
    RobotLinkModelResponse,
    RobotMetricsRequest,
    RobotMetricsResponse,
    RobotStateRequest,
    RobotStateResponse,
)
from shared.schemas.messages import utcnow

from .errors import MalformedError, NotFoundError, StateServiceError, UnavailableError
from .mesh_store import MeshStore
from .state_store import StateSnapshot, StateStore

logger = structlog.get_logger()

ResponseT = TypeVar("ResponseT", bound=MessageBase)


class RobotStateService:
    """Read-only query service over a StateStore."""

    # RPC method name -> (request type, response type, handler attribute)
    METHODS: dict[str, tuple[type[MessageBase], type[MessageBase], str]] = {
        "GetRobotState": (RobotStateRequest, RobotStateResponse, "get_robot_state"),
        "GetRobotMetrics": (RobotMetricsRequest, RobotMetricsResponse, "get_robot_metrics"),
        "GetHardwareConfiguration": (
            RobotHardwareConfigurationRequest,
            RobotHardwareConfigurationResponse,
            "get_hardware_configuration",
        ),
        "GetLinkModel": (RobotLinkModelRequest, RobotLinkModelResponse, "get_link_model"),
    }

    def __init__(
        self,
        store: StateStore,
        mesh_store: MeshStore | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the service.

        Args:
            store: Snapshot source
            mesh_store: Fallback source of link meshes
            clock: Source of the current time for response headers
        """
        self._store = store
        self._mesh_store = mesh_store
        self._clock = clock

    def get_robot_state(self, request: RobotStateRequest) -> RobotStateResponse:
        """Get the current robot state."""

        def build(snapshot: StateSnapshot) -> dict[str, Any]:
            if snapshot.robot_state is None:
                raise UnavailableError("no robot state has been published yet")
            return {"robot_state": snapshot.robot_state}

        return self._respond("GetRobotState", request.header, RobotStateResponse, build)

    def get_robot_metrics(self, request: RobotMetricsRequest) -> RobotMetricsResponse:
        """Get the current robot metrics."""

        def build(snapshot: StateSnapshot) -> dict[str, Any]:
            if snapshot.robot_metrics is None:
                raise UnavailableError("no robot metrics have been published yet")
            return {"robot_metrics": snapshot.robot_metrics}

        return self._respond("GetRobotMetrics", request.header, RobotMetricsResponse, build)

    def get_hardware_configuration(
        self, request: RobotHardwareConfigurationRequest
    ) -> RobotHardwareConfigurationResponse:
        """Get the current hardware configuration."""

        def build(snapshot: StateSnapshot) -> dict[str, Any]:
            return {"hardware_configuration": self._require_hardware(snapshot)}

        return self._respond(
            "GetHardwareConfiguration",
            request.header,
            RobotHardwareConfigurationResponse,
            build,
        )

    def get_link_model(self, request: RobotLinkModelRequest) -> RobotLinkModelResponse:
        """Get the mesh for one link of the current skeleton."""
        link_name = request.link_name

        def build(snapshot: StateSnapshot) -> dict[str, Any]:
            skeleton = self._require_hardware(snapshot).skeleton
            link = skeleton.link(link_name)
            if link is None:
                raise NotFoundError(f"link '{link_name}' is not in the robot skeleton")

            model = link.obj_model
            if model is None and self._mesh_store is not None:
                model = self._mesh_store.get(link_name)
            if model is None:
                raise NotFoundError(f"no model available for link '{link_name}'")
            return {"link_model": model}

        return self._respond("GetLinkModel", request.header, RobotLinkModelResponse, build)

    def dispatch(self, method: str, payload: bytes) -> bytes:
        """Handle a MessagePack-encoded request.

        Args:
            method: RPC method name, e.g. "GetRobotState"
            payload: MessagePack-encoded request envelope

        Returns:
            MessagePack-encoded response envelope
        """
        received = self._clock()

        if method not in self.METHODS:
            error = NotFoundError(f"unknown method '{method}'")
            logger.warning("rpc_unknown_method", method=method)
            return ErrorResponse(
                header=self._header(RequestHeader(), received, error.code, error.message)
            ).to_msgpack()

        request_type, response_type, handler_name = self.METHODS[method]

        try:
            request = request_type.from_msgpack(payload)
        except (ValueError, msgpack.exceptions.UnpackException) as e:
            error = MalformedError(f"could not decode {request_type.__name__}: {e}")
            logger.warning("rpc_malformed_request", method=method, error=str(e))
            return response_type(
                header=self._header(RequestHeader(), received, error.code, error.message)
            ).to_msgpack()

        try:
            response = getattr(self, handler_name)(request)
        except Exception as e:
            logger.error("rpc_handler_error", method=method, error=str(e))
            header = getattr(request, "header", RequestHeader())
            return response_type(
                header=self._header(
                    header, received, ErrorCode.INTERNAL_SERVER_ERROR, "internal server error"
                )
            ).to_msgpack()

        return response.to_msgpack()

    def _respond(
        self,
        method: str,
        request_header: RequestHeader,
        response_type: type[ResponseT],
        build: Callable[[StateSnapshot], dict[str, Any]],
    ) -> ResponseT:
        """Run a query against one snapshot and wrap the result in a response."""
        received = self._clock()
        try:
            payload = build(self._store.snapshot())
        except StateServiceError as e:
            logger.info("request_failed", method=method, code=e.code.name, error=e.message)
            return response_type(header=self._header(request_header, received, e.code, e.message))

        if not request_header.disable_rpc_logging:
            logger.debug("request_served", method=method, client=request_header.client_name)
        return response_type(
            header=self._header(request_header, received, ErrorCode.OK), **payload
        )

    def _header(
        self,
        request_header: RequestHeader,
        received: datetime,
        code: ErrorCode,
        message: str = "",
    ) -> ResponseHeader:
        return ResponseHeader(
            request_header=request_header,
            request_received_timestamp=received,
            response_timestamp=self._clock(),
            error=CommonError(code=code, message=message),
        )

    @staticmethod
    def _require_hardware(snapshot: StateSnapshot) -> HardwareConfiguration:
        if snapshot.hardware_configuration is None:
            raise UnavailableError("no hardware configuration has been published yet")
        return snapshot.hardware_configuration
