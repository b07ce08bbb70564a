"""Configuration management for robostate server.

Uses Pydantic Settings for configuration with environment variable support.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with ROBOSTATE_ prefix.
    Example: ROBOSTATE_API_PORT=8080
    """

    model_config = SettingsConfigDict(
        env_prefix="ROBOSTATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Server identification
    server_id: str = Field(default="robostate-server-01", description="Unique server identifier")

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API bind address")
    api_port: int = Field(default=8000, description="API port")
    api_workers: int = Field(default=1, description="Number of API workers")

    # Fault tracking
    fault_retention_s: float = Field(
        default=600.0, gt=0, description="How long cleared faults stay in the historical list"
    )

    # Link meshes
    mesh_dir: Path | None = Field(
        default=None, description="Directory of <link_name>.obj files for links without inline meshes"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or console")

    # Paths
    data_dir: Path = Field(default=Path("./data"), description="Data directory")

    @property
    def resolved_mesh_dir(self) -> Path:
        """Mesh directory, defaulting to <data_dir>/meshes."""
        return self.mesh_dir if self.mesh_dir is not None else self.data_dir / "meshes"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
