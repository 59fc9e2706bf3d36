"""
Configuration management for the pinmap viewer and its credential API.

Uses pydantic-settings for type-safe configuration with environment variable support.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Fixed location shown by the viewer
TARGET_ADDRESS = "4975 NE 14th Pl, Portland, OR 97211"
INITIAL_MAP_CENTER = {"lat": 45.558, "lng": -122.651}  # Portland center
INITIAL_MAP_ZOOM = 20


class MapCredentialSettings(BaseSettings):
    """Credentials the backend hands out to the client.

    The variable names are shared with the hosting platform, so they are
    matched exactly instead of through a prefix.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    map_id: Optional[str] = Field(default=None, validation_alias="GOOGLE_MAPS_MAP_ID")
    api_key: Optional[str] = Field(default=None, validation_alias="NEXT_PUBLIC_GOOGLE_MAPS_API_KEY")


class ViewerSettings(BaseSettings):
    """Client session settings."""

    model_config = SettingsConfigDict(
        env_prefix="PINMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_url: str = "http://localhost:8000/api/map-config.js"
    target_address: str = TARGET_ADDRESS

    # Initial camera
    initial_lat: float = INITIAL_MAP_CENTER["lat"]
    initial_lng: float = INITIAL_MAP_CENTER["lng"]
    zoom: float = INITIAL_MAP_ZOOM
    tilt: float = 45.0
    heading: float = 0.0
    gesture_handling: str = "greedy"
    disable_default_ui: bool = False

    # Mapping SDK bootstrap
    maps_libraries: str = "places,geocoding"
    maps_version: str = "beta"

    # Headless host
    viewport_width: int = 1280
    viewport_height: int = 720
    frame_interval: float = 1 / 60  # seconds

    # HTTP settings
    http_timeout: float = 30.0  # seconds

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    log_json: bool = False  # write the log file as JSON lines

    @property
    def initial_center(self) -> dict[str, float]:
        return {"lat": self.initial_lat, "lng": self.initial_lng}


class MarkerSettings(BaseSettings):
    """3D marker model settings."""

    model_config = SettingsConfigDict(
        env_prefix="PINMAP_MARKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = "assets/onewheel_pint.glb"
    scale: float = 20.0
    # Orients the pin so it points at the ground
    rotation_x: float = 7.84
    rotation_z: float = -0.40
    altitude: float = 15.0  # metres above ground
    spin_step: float = 0.01  # radians per animation frame

    # Asset download
    http_max_retries: int = 3
    http_retry_delay: float = 1.0  # seconds


class APISettings(BaseSettings):
    """API server settings."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    assets_dir: str = "assets"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


class Settings(BaseSettings):
    """Main settings class that combines all settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    credentials: MapCredentialSettings = Field(default_factory=MapCredentialSettings)
    viewer: ViewerSettings = Field(default_factory=ViewerSettings)
    marker: MarkerSettings = Field(default_factory=MarkerSettings)
    api: APISettings = Field(default_factory=APISettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience instance for quick access
settings = get_settings()
