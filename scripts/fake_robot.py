#!/usr/bin/env python3
"""
Simulated robot for testing the robostate server.

FAKE robot that publishes state, metrics, hardware configuration and fault
transitions through the HTTP ingest routes.

Usage:
    # Terminal 1: Start server
    uvicorn server.api.main:app --port 8000

    # Terminal 2: Run fake robot
    python scripts/fake_robot.py
"""

import argparse
import random
import signal
import sys
import time
from datetime import datetime, timedelta, timezone

import httpx

# Add parent to path for imports
sys.path.insert(0, str(__file__).rsplit("/", 2)[0])

from shared.schemas import (
    BatteryState,
    BatteryStatus,
    CommsState,
    EStopState,
    EStopStatus,
    EStopType,
    HardwareConfiguration,
    JointState,
    KinematicState,
    Link,
    MotorPowerState,
    ObjModel,
    Parameter,
    PowerState,
    RobotMetrics,
    RobotState,
    Severity,
    ShorePowerState,
    Skeleton,
    SystemFault,
    WiFiMode,
    WiFiState,
)

LEGS = ["fl", "fr", "hl", "hr"]
JOINTS = [f"{leg}.{joint}" for leg in LEGS for joint in ("hx", "hy", "kn")]

BODY_OBJ = """o body
v -0.4 -0.1 -0.05
v 0.4 -0.1 -0.05
v 0.4 0.1 -0.05
v -0.4 0.1 -0.05
f 1 2 3 4
"""


class FakeRobot:
    """Simulated robot publishing over HTTP."""

    def __init__(self, url: str, robot_name: str):
        self.url = url
        self.robot_name = robot_name
        self.client: httpx.Client | None = None
        self.running = False
        self.start_time = time.time()
        self.charge = 95.0
        self.distance = 0.0
        self.next_fault_uid = 1
        self.active_fault: int | None = None

    def connect(self) -> bool:
        """Check the server is reachable."""
        try:
            self.client = httpx.Client(base_url=self.url, timeout=5.0)
            self.client.get("/health").raise_for_status()
            print(f"[{self.robot_name}] Connected to {self.url}")
            return True
        except httpx.HTTPError as e:
            print(f"[{self.robot_name}] Connection failed: {e}")
            return False

    def publish_hardware(self):
        """Publish the skeleton once at startup."""
        if not self.client:
            return

        links = [Link(name="body", obj_model=ObjModel(file_name="body.obj", file_contents=BODY_OBJ))]
        links += [Link(name=f"{leg}.{part}") for leg in LEGS for part in ("hip", "uleg", "lleg")]
        config = HardwareConfiguration(skeleton=Skeleton(links=tuple(links), urdf="<robot name='fake'/>"))

        self.client.put("/telemetry/hardware-configuration", content=config.to_json(),
                        headers={"content-type": "application/json"})
        print(f"[{self.robot_name}] Published {len(links)} links")

    def publish_state(self):
        """Publish a fake robot state."""
        if not self.client:
            return

        now = datetime.now(timezone.utc)
        self.charge = max(0.0, self.charge - random.uniform(0.0, 0.2))

        state = RobotState(
            power_state=PowerState(
                timestamp=now,
                motor_power_state=MotorPowerState.ON,
                shore_power_state=ShorePowerState.OFF_SHORE,
            ),
            battery_states=(
                BatteryState(
                    timestamp=now,
                    identifier="battery-0",
                    charge_percentage=round(self.charge, 1),
                    estimated_runtime=timedelta(minutes=self.charge * 0.9),
                    current=round(-random.uniform(8.0, 12.0), 2),
                    voltage=round(random.uniform(56.0, 58.0), 2),
                    temperatures=tuple(round(random.uniform(28, 34), 1) for _ in range(4)),
                    status=BatteryStatus.DISCHARGING,
                ),
            ),
            comms_states=(
                CommsState(
                    timestamp=now,
                    wifi_state=WiFiState(current_mode=WiFiMode.CLIENT, essid="lab"),
                ),
            ),
            estop_states=(
                EStopState(
                    timestamp=now,
                    name="hardware_estop",
                    type=EStopType.HARDWARE,
                    state=EStopStatus.NOT_ESTOPPED,
                ),
                EStopState(
                    timestamp=now,
                    name="software_estop",
                    type=EStopType.SOFTWARE,
                    state=EStopStatus.NOT_ESTOPPED,
                ),
            ),
            kinematic_state=KinematicState(
                timestamp=now,
                joint_states=tuple(
                    JointState(name=name, position=random.uniform(-0.5, 0.5), velocity=0.0)
                    for name in JOINTS
                ),
            ),
        )

        self.client.put("/telemetry/robot-state", content=state.to_json(),
                        headers={"content-type": "application/json"})
        print(f"[{self.robot_name}] charge={self.charge:.1f}%")

    def publish_metrics(self):
        """Publish fake metrics."""
        if not self.client:
            return

        self.distance += random.uniform(0.5, 1.5)
        metrics = RobotMetrics(
            timestamp=datetime.now(timezone.utc),
            metrics=(
                Parameter(label="distance", units="m", value=round(self.distance, 2)),
                Parameter(label="gait cycles", value=int(self.distance / 0.6)),
                Parameter(label="time moving", value=timedelta(seconds=time.time() - self.start_time)),
            ),
        )
        self.client.put("/telemetry/metrics", content=metrics.to_json(),
                        headers={"content-type": "application/json"})

    def toggle_fault(self):
        """Randomly raise or clear a fault."""
        if not self.client:
            return

        if self.active_fault is not None:
            if random.random() < 0.3:
                self.client.delete(f"/telemetry/faults/{self.active_fault}")
                print(f"[{self.robot_name}] cleared fault {self.active_fault}")
                self.active_fault = None
            return

        if random.random() < 0.2:
            fault = SystemFault(
                name="battery_low" if self.charge < 30 else "camera_dropout",
                onset_timestamp=datetime.now(timezone.utc),
                code=random.randint(1, 99),
                uid=self.next_fault_uid,
                error_message="Simulated fault",
                attributes=("battery",) if self.charge < 30 else ("vision",),
                severity=random.choice([Severity.INFO, Severity.WARN, Severity.CRITICAL]),
            )
            self.client.post("/telemetry/faults", content=fault.to_json(),
                             headers={"content-type": "application/json"})
            print(f"[{self.robot_name}] raised fault {fault.uid} ({fault.severity.name})")
            self.active_fault = fault.uid
            self.next_fault_uid += 1

    def run(self):
        """Run the fake robot."""
        if not self.connect():
            return

        self.publish_hardware()
        self.running = True
        print(f"[{self.robot_name}] Running (Ctrl+C to stop)")

        try:
            while self.running:
                self.publish_state()
                self.publish_metrics()
                self.toggle_fault()
                time.sleep(2)
        except KeyboardInterrupt:
            pass
        finally:
            if self.client:
                self.client.close()
            print(f"\n[{self.robot_name}] Stopped")

    def stop(self):
        """Stop the robot."""
        self.running = False


def main():
    parser = argparse.ArgumentParser(description="Simulated robot state producer")
    parser.add_argument("--url", default="http://localhost:8000", help="Server URL")
    parser.add_argument("--name", default="fake-robot-01", help="Robot name")
    args = parser.parse_args()

    robot = FakeRobot(args.url, args.name)

    signal.signal(signal.SIGINT, lambda *_: robot.stop())
    signal.signal(signal.SIGTERM, lambda *_: robot.stop())

    robot.run()


if __name__ == "__main__":
    main()
