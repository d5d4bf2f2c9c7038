"""Workspace configuration model for the discography pipeline."""

from pathlib import Path
from typing import Optional
import json
from dataclasses import dataclass, field

from ..exceptions import ConfigurationError


@dataclass
class PathConfig:
    """Configuration for workspace directories, relative to the root."""
    source_audio: str = "source/audio"
    lyrics: str = "source/lyrics"
    images: str = "source/image"
    public_output: str = "public"
    private_output: str = "private"
    artwork_cache: str = "cache/artwork"


@dataclass
class SiteConfig:
    """Configuration for published URLs and credit lines."""
    canonical_url: str = "https://music.example.com"
    audio_url: str = "https://audio.example.com"
    artist_url: str = "https://example.com"
    copyright_name: Optional[str] = None  # replaces the primary artist in copyright lines
    license: Optional[str] = None


@dataclass
class EncodingConfig:
    """Configuration for transcoding, probing and tagging."""
    ffmpeg: str = "ffmpeg"
    encoder_signature: str = "discography"
    min_sample_rate: int = 44_100
    min_bit_depth: int = 16
    artwork_size: int = 1000
    fallback_artwork: str = "fallback"
    workers: int = 1


@dataclass
class LyricsConfig:
    """Configuration for lyric parsing and rendering."""
    max_line_length: int = 100
    subtitle_merge_gap: float = 1.0
    subtitle_wrap_width: int = 50


@dataclass
class WorkspaceConfig:
    """Main configuration model, resolved once at process start."""
    root: Path
    primary_artist: str = "Unknown Artist"
    document: str = "discog.json"
    paths: PathConfig = field(default_factory=PathConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    encoding: EncodingConfig = field(default_factory=EncodingConfig)
    lyrics: LyricsConfig = field(default_factory=LyricsConfig)

    @classmethod
    def from_root(cls, root: Path) -> "WorkspaceConfig":
        """Create a default configuration anchored at a workspace root."""
        return cls(root=Path(root))

    def resolve(self, relative: str) -> Path:
        """Resolve a configured path against the workspace root."""
        path = Path(relative)
        if path.is_absolute():
            return path
        return self.root / path

    @property
    def document_path(self) -> Path:
        return self.resolve(self.document)

    @property
    def source_audio_dir(self) -> Path:
        return self.resolve(self.paths.source_audio)

    @property
    def lyrics_dir(self) -> Path:
        return self.resolve(self.paths.lyrics)

    @property
    def images_dir(self) -> Path:
        return self.resolve(self.paths.images)

    @property
    def public_dir(self) -> Path:
        return self.resolve(self.paths.public_output)

    @property
    def private_dir(self) -> Path:
        return self.resolve(self.paths.private_output)

    @property
    def artwork_cache_dir(self) -> Path:
        return self.resolve(self.paths.artwork_cache)

    def page_url(self, slug: str) -> str:
        """Canonical page URL for a slug."""
        return f"{self.site.canonical_url.rstrip('/')}/{slug}/"


def _dataclass_to_dict(obj):
    """Convert dataclass to dict recursively."""
    from dataclasses import is_dataclass, asdict
    if is_dataclass(obj):
        result = {}
        for key, value in asdict(obj).items():
            result[key] = _dataclass_to_dict(value)
        return result
    elif isinstance(obj, Path):
        return str(obj)
    elif isinstance(obj, dict):
        return {key: _dataclass_to_dict(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_dataclass_to_dict(item) for item in obj]
    else:
        return obj


def _dict_to_dataclass(data, dataclass_type):
    """Convert dict to dataclass recursively, rejecting unknown keys."""
    from dataclasses import is_dataclass, fields
    if not is_dataclass(dataclass_type):
        return data

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected an object for {dataclass_type.__name__}, got {type(data).__name__}"
        )

    field_types = {f.name: f.type for f in fields(dataclass_type)}

    unknown = sorted(set(data) - set(field_types))
    if unknown:
        formatted = ", ".join(f'"{key}"' for key in unknown)
        raise ConfigurationError(f"{dataclass_type.__name__} has unexpected keys: {formatted}")

    kwargs = {}
    for field_name, field_type in field_types.items():
        if field_name in data:
            if hasattr(field_type, '__dataclass_fields__'):
                kwargs[field_name] = _dict_to_dataclass(data[field_name], field_type)
            elif field_type is Path:
                kwargs[field_name] = Path(data[field_name])
            else:
                kwargs[field_name] = data[field_name]

    try:
        return dataclass_type(**kwargs)
    except TypeError as e:
        raise ConfigurationError(f"Invalid {dataclass_type.__name__}: {e}")


def load_config(config_path: Path) -> WorkspaceConfig:
    """Load configuration from JSON file.

    A config without a ``root`` is anchored at the directory holding the file.
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Config file does not exist: {config_path}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file {config_path} is invalid JSON: {e}")

    if isinstance(config_data, dict) and "root" not in config_data:
        config_data["root"] = str(Path(config_path).resolve().parent)

    config = _dict_to_dataclass(config_data, WorkspaceConfig)
    validate_config(config)
    return config


def save_config(config: WorkspaceConfig, config_path: Path) -> None:
    """Save configuration to JSON file."""
    config_dict = _dataclass_to_dict(config)

    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config_dict, f, indent=2)


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file next to a workspace."""
    default_config = WorkspaceConfig(root=Path(config_path).resolve().parent)
    save_config(default_config, config_path)


def validate_config(config: WorkspaceConfig) -> None:
    """Validate configuration values."""
    if not config.primary_artist or config.primary_artist.strip() != config.primary_artist:
        raise ConfigurationError(f'Invalid primary artist: "{config.primary_artist}"')

    if config.encoding.workers < 1:
        raise ConfigurationError("Worker count must be at least 1")

    if config.encoding.artwork_size <= 0:
        raise ConfigurationError("Artwork size must be positive")

    if config.lyrics.max_line_length <= 0 or config.lyrics.subtitle_wrap_width <= 0:
        raise ConfigurationError("Lyric line widths must be positive")

    if config.lyrics.subtitle_merge_gap < 0:
        raise ConfigurationError("Subtitle merge gap must not be negative")
