"""Static hardware description schemas.

The skeleton changes only with hardware or firmware revisions, not per
state snapshot.
"""

from pydantic import Field

from .messages import MessageBase


class ObjModel(MessageBase):
    """Mesh for one link, as the contents of a Wavefront .obj file."""

    file_name: str
    file_contents: str


class Link(MessageBase):
    """A robot link.

    Attributes:
        name: Link name, matching the URDF
        obj_model: Inline mesh, if the producer supplied one
    """

    name: str
    obj_model: ObjModel | None = None


class Skeleton(MessageBase):
    """Kinematic model of the robot.

    Attributes:
        links: Robot links
        urdf: URDF description of the skeleton
    """

    links: tuple[Link, ...] = ()
    urdf: str = ""

    def link(self, name: str) -> Link | None:
        """Get a link by name."""
        for link in self.links:
            if link.name == name:
                return link
        return None

    @property
    def link_names(self) -> list[str]:
        return [link.name for link in self.links]


class HardwareConfiguration(MessageBase):
    skeleton: Skeleton = Field(default_factory=Skeleton)
