"""Mesh files for robot links.

Supplies ObjModel contents for links whose skeleton entry carries no inline
mesh. Files are looked up as <directory>/<link_name>.obj.
"""

from pathlib import Path

import structlog

from shared.schemas import ObjModel

logger = structlog.get_logger()


class MeshStore:
    """Directory-backed, cached source of link meshes."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)
        self._cache: dict[str, ObjModel] = {}

    @property
    def directory(self) -> Path:
        return self._directory

    def get(self, link_name: str) -> ObjModel | None:
        """Get the mesh for a link.

        Args:
            link_name: Link name from the skeleton

        Returns:
            The mesh, or None if no readable file exists for the link
        """
        if link_name in self._cache:
            return self._cache[link_name]

        if not link_name or "/" in link_name or "\\" in link_name or link_name.startswith("."):
            logger.warning("mesh_link_name_rejected", link_name=link_name)
            return None

        path = self._directory / f"{link_name}.obj"
        if not path.is_file():
            return None

        try:
            contents = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("mesh_read_failed", link_name=link_name, path=str(path), error=str(e))
            return None

        model = ObjModel(file_name=path.name, file_contents=contents)
        self._cache[link_name] = model
        logger.debug("mesh_loaded", link_name=link_name, path=str(path))
        return model

    def clear_cache(self) -> None:
        self._cache.clear()
