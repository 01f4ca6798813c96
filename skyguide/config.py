"""YAML configuration loader with dataclass mapping."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class ObserverConfig:
    heading_smoothing: float = 0.15
    fallback_enabled: bool = True
    fallback_latitude: float = 48.8566    # Paris
    fallback_longitude: float = 2.3522


@dataclass
class EngineConfig:
    sphere_radius: float = 500.0
    update_interval: int = 2      # ticks between position recomputes


@dataclass
class GazeConfig:
    match_threshold_deg: float = 8.0
    horizon_margin_deg: float = -5.0
    hold_seconds: float = 0.5


@dataclass
class CatalogConfig:
    magnitude_limit: float = 5.0


@dataclass
class SessionConfig:
    tick_rate: float = 60.0       # Hz, background driver only


@dataclass
class WebConfig:
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8080
    stream_fps: int = 5
    stream_quality: int = 70
    preview_size: int = 512


@dataclass
class LoggingConfig:
    log_dir: str = "data/logs"


@dataclass
class AppConfig:
    observer: ObserverConfig = field(default_factory=ObserverConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    gaze: GazeConfig = field(default_factory=GazeConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _apply_dict(dc: object, data: dict) -> None:
    """Apply dictionary values onto a dataclass instance, ignoring unknown keys."""
    for key, value in data.items():
        if hasattr(dc, key):
            setattr(dc, key, value)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from a YAML file, falling back to defaults."""
    config = AppConfig()

    if path is None:
        path = os.environ.get("CONFIG_PATH", "config/default.yaml")

    path = Path(path)
    if path.exists():
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}

        section_map = {
            "observer": config.observer,
            "engine": config.engine,
            "gaze": config.gaze,
            "catalog": config.catalog,
            "session": config.session,
            "web": config.web,
            "logging": config.logging,
        }

        for section_name, dc_instance in section_map.items():
            if section_name in raw and isinstance(raw[section_name], dict):
                _apply_dict(dc_instance, raw[section_name])

    # Environment variable overrides
    env_lat = os.environ.get("OBSERVER_LAT")
    if env_lat:
        config.observer.fallback_latitude = float(env_lat)

    env_lon = os.environ.get("OBSERVER_LON")
    if env_lon:
        config.observer.fallback_longitude = float(env_lon)

    env_host = os.environ.get("WEB_HOST")
    if env_host:
        config.web.host = env_host

    env_port = os.environ.get("WEB_PORT")
    if env_port:
        config.web.port = int(env_port)

    return config
