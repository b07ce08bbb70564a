"""Tests for the command-line interface."""

import json

import httpx
import pytest
from click.testing import CliRunner

from cli import robostate_cli
from shared.schemas import (
    CommonError,
    ErrorCode,
    HardwareConfiguration,
    Link,
    ObjModel,
    ResponseHeader,
    RobotHardwareConfigurationResponse,
    RobotLinkModelResponse,
    RobotState,
    RobotStateResponse,
    Severity,
    Skeleton,
    SystemFaultState,
)

from .conftest import make_fault


def ok_header() -> ResponseHeader:
    return ResponseHeader(error=CommonError(code=ErrorCode.OK))


@pytest.fixture
def routes():
    """Path -> (status, JSON body) served by the mock transport."""
    return {}


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture(autouse=True)
def mock_client(monkeypatch, routes, requests_seen):
    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        if request.url.path not in routes:
            return httpx.Response(404, json={"detail": "Not Found"})
        status, body = routes[request.url.path]
        return httpx.Response(status, json=body)

    def get_client(url: str) -> httpx.Client:
        return httpx.Client(base_url=url, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(robostate_cli, "get_client", get_client)


@pytest.fixture
def runner():
    return CliRunner()


class TestHealthCommand:
    """Tests for the health command."""

    def test_health(self, runner, routes):
        routes["/health"] = (
            200,
            {
                "status": "healthy",
                "server_id": "robostate-server-01",
                "snapshot": {"published": True, "sequence": 4, "published_at": "2024-05-01T12:00:00Z"},
                "faults": {"active": 1, "historical": 2},
            },
        )

        result = runner.invoke(robostate_cli.cli, ["health"])

        assert result.exit_code == 0
        assert "healthy" in result.output
        assert "#4" in result.output
        assert "1 active, 2 historical" in result.output


class TestStateCommands:
    """Tests for state and fault commands."""

    @pytest.fixture
    def state_route(self, routes, robot_state):
        faulted = robot_state.model_copy(
            update={
                "system_fault_state": SystemFaultState(
                    faults=(make_fault(5, Severity.CRITICAL, ("battery",), name="battery_low"),),
                    historical_faults=(make_fault(3, Severity.INFO, ("vision",), name="camera_dropout"),),
                    aggregated={"battery": Severity.CRITICAL},
                )
            }
        )
        response = RobotStateResponse(header=ok_header(), robot_state=faulted)
        routes["/robot-state"] = (200, response.model_dump(mode="json"))

    def test_state_summary(self, runner, state_route, requests_seen):
        result = runner.invoke(robostate_cli.cli, ["state"])

        assert result.exit_code == 0
        assert "motors ON" in result.output
        assert "Safe to command: yes" in result.output
        assert "battery" in result.output
        assert "CRITICAL" in result.output

        body = json.loads(requests_seen[0].content)
        assert body["header"]["client_name"] == "robostate-cli"

    def test_not_safe_to_command(self, runner, routes):
        response = RobotStateResponse(header=ok_header(), robot_state=RobotState())
        routes["/robot-state"] = (200, response.model_dump(mode="json"))

        result = runner.invoke(robostate_cli.cli, ["state"])

        assert result.exit_code == 0
        assert "Safe to command: no" in result.output

    def test_faults(self, runner, state_route):
        result = runner.invoke(robostate_cli.cli, ["faults"])

        assert result.exit_code == 0
        assert "Active faults (1)" in result.output
        assert "battery_low" in result.output
        assert "Historical faults (1)" in result.output
        assert "camera_dropout" in result.output

    def test_faults_without_historical(self, runner, state_route):
        result = runner.invoke(robostate_cli.cli, ["faults", "--no-historical"])

        assert result.exit_code == 0
        assert "Historical" not in result.output

    def test_unavailable(self, runner, routes):
        response = RobotStateResponse(
            header=ResponseHeader(
                error=CommonError(
                    code=ErrorCode.UNAVAILABLE, message="no robot state has been published yet"
                )
            )
        )
        routes["/robot-state"] = (503, response.model_dump(mode="json"))

        result = runner.invoke(robostate_cli.cli, ["state"])

        assert result.exit_code == 1
        assert "no robot state has been published yet" in result.output


class TestHardwareCommands:
    """Tests for links and link-model commands."""

    def test_links(self, runner, routes):
        config = HardwareConfiguration(
            skeleton=Skeleton(
                links=(
                    Link(name="body", obj_model=ObjModel(file_name="body.obj", file_contents="o body\n")),
                    Link(name="fl.uleg"),
                )
            )
        )
        response = RobotHardwareConfigurationResponse(
            header=ok_header(), hardware_configuration=config
        )
        routes["/hardware-configuration"] = (200, response.model_dump(mode="json"))

        result = runner.invoke(robostate_cli.cli, ["links"])

        assert result.exit_code == 0
        assert "body" in result.output
        assert "inline mesh" in result.output
        assert "fl.uleg" in result.output

    def test_link_model_to_file(self, runner, routes, tmp_path, requests_seen):
        response = RobotLinkModelResponse(
            header=ok_header(),
            link_model=ObjModel(file_name="body.obj", file_contents="o body\n"),
        )
        routes["/link-model"] = (200, response.model_dump(mode="json"))
        output = tmp_path / "body.obj"

        result = runner.invoke(robostate_cli.cli, ["link-model", "body", "-o", str(output)])

        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == "o body\n"
        assert json.loads(requests_seen[0].content)["link_name"] == "body"

    def test_link_model_not_found(self, runner, routes):
        response = RobotLinkModelResponse(
            header=ResponseHeader(
                error=CommonError(
                    code=ErrorCode.NOT_FOUND, message="link 'tail' is not in the robot skeleton"
                )
            )
        )
        routes["/link-model"] = (404, response.model_dump(mode="json"))

        result = runner.invoke(robostate_cli.cli, ["link-model", "tail"])

        assert result.exit_code == 1
        assert "tail" in result.output


class TestConnectionErrors:
    """Tests for unreachable servers."""

    def test_cannot_connect(self, runner, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        monkeypatch.setattr(
            robostate_cli,
            "get_client",
            lambda url: httpx.Client(base_url=url, transport=httpx.MockTransport(handler)),
        )

        result = runner.invoke(robostate_cli.cli, ["metrics"])

        assert result.exit_code == 1
        assert "Cannot connect" in result.output
