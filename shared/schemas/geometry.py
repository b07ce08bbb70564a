"""Geometric primitives carried in kinematic state.

Plain data only; composing or transforming poses is left to callers.
"""

from pydantic import Field

from .messages import MessageBase


class Vec3(MessageBase):
    """3D vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Quaternion(MessageBase):
    """Rotation quaternion, identity by default."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class SE3Pose(MessageBase):
    """Rigid transform.

    Attributes:
        position: Translation in meters
        rotation: Orientation
    """

    position: Vec3 = Field(default_factory=Vec3)
    rotation: Quaternion = Field(default_factory=Quaternion)


class SE3Velocity(MessageBase):
    """Spatial velocity.

    Attributes:
        linear: Linear velocity in m/s
        angular: Angular velocity in rad/s
    """

    linear: Vec3 = Field(default_factory=Vec3)
    angular: Vec3 = Field(default_factory=Vec3)


class Plane(MessageBase):
    """Plane given by a point on it and its normal."""

    point: Vec3 = Field(default_factory=Vec3)
    normal: Vec3 = Field(default_factory=lambda: Vec3(z=1.0))
