"""Configuration models for the discography pipeline."""

from .config import (
    WorkspaceConfig,
    PathConfig,
    SiteConfig,
    EncodingConfig,
    LyricsConfig,
    load_config,
    save_config,
    create_default_config,
)

__all__ = [
    "WorkspaceConfig",
    "PathConfig",
    "SiteConfig",
    "EncodingConfig",
    "LyricsConfig",
    "load_config",
    "save_config",
    "create_default_config",
]
