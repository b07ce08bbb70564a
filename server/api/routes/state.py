"""Robot state query routes.

Each route takes a request envelope and returns the response envelope. The
HTTP status mirrors the error code in the response header.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from shared.schemas import (
    ErrorCode,
    MessageBase,
    RobotHardwareConfigurationRequest,
    RobotLinkModelRequest,
    RobotMetricsRequest,
    RobotStateRequest,
)

router = APIRouter()

MSGPACK_MEDIA_TYPE = "application/msgpack"

_HTTP_STATUS = {
    ErrorCode.OK: 200,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.MALFORMED: 422,
    ErrorCode.UNAVAILABLE: 503,
}


def _to_http(response: MessageBase) -> JSONResponse:
    """Render a response envelope with the status matching its header."""
    code = response.header.error.code  # type: ignore[attr-defined]
    return JSONResponse(
        status_code=_HTTP_STATUS.get(code, 500),
        content=response.model_dump(mode="json"),
    )


@router.post("/robot-state")
async def get_robot_state(request: RobotStateRequest | None = None) -> JSONResponse:
    """Get the current robot state."""
    from server.api.main import get_state_service

    service = get_state_service()
    return _to_http(service.get_robot_state(request or RobotStateRequest()))


@router.post("/robot-metrics")
async def get_robot_metrics(request: RobotMetricsRequest | None = None) -> JSONResponse:
    """Get the current robot metrics."""
    from server.api.main import get_state_service

    service = get_state_service()
    return _to_http(service.get_robot_metrics(request or RobotMetricsRequest()))


@router.post("/hardware-configuration")
async def get_hardware_configuration(
    request: RobotHardwareConfigurationRequest | None = None,
) -> JSONResponse:
    """Get the current hardware configuration."""
    from server.api.main import get_state_service

    service = get_state_service()
    return _to_http(
        service.get_hardware_configuration(request or RobotHardwareConfigurationRequest())
    )


@router.post("/link-model")
async def get_link_model(request: RobotLinkModelRequest) -> JSONResponse:
    """Get the mesh for one link."""
    from server.api.main import get_state_service

    service = get_state_service()
    return _to_http(service.get_link_model(request))


@router.post("/rpc/{method}")
async def rpc(method: str, request: Request) -> Response:
    """MessagePack RPC endpoint. Errors are reported in the response header."""
    from server.api.main import get_state_service

    service = get_state_service()
    payload = await request.body()
    return Response(content=service.dispatch(method, payload), media_type=MSGPACK_MEDIA_TYPE)
