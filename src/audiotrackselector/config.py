"""Configuration management for audiotrackselector."""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from audiotrackselector.models.profile import (
    ChannelLimit,
    DeviceProfile,
    DirectPlayProfile,
    MediaType,
    split_codec_list,
)


def _codec_list(v: Any) -> Any:
    """Accept either a list of codecs or a comma-separated string."""
    if isinstance(v, str):
        return list(split_codec_list(v))
    if isinstance(v, list):
        return [str(c).strip().lower() for c in v if str(c).strip()]
    return v


class DirectPlayConfig(BaseModel):
    """Codecs a device direct-plays for one media type."""

    type: Literal["audio", "video", "photo"] = Field(
        default="video", description="Media type (video entries carry audio+video)"
    )
    audio_codecs: List[str] = Field(default_factory=list, description="Audio codecs")

    @field_validator("audio_codecs", mode="before")
    @classmethod
    def split_codecs(cls, v: Any) -> Any:
        return _codec_list(v)


class ChannelLimitConfig(BaseModel):
    """Audio channel ceiling of a device."""

    max_channels: int = Field(..., ge=1, description="Maximum audio channels")
    applies_to_audio: bool = Field(default=True, description="Limit applies to audio")


class DeviceProfileConfig(BaseModel):
    """Device capability profile."""

    name: str = Field(default="", description="Client name (e.g. 'Apple TV')")
    direct_play: List[DirectPlayConfig] = Field(
        default_factory=list, description="Direct-play codec entries"
    )
    transcoding_codecs: List[str] = Field(
        default_factory=list, description="Codecs reachable via transcode"
    )
    channel_limits: List[ChannelLimitConfig] = Field(
        default_factory=list, description="Audio channel ceilings"
    )
    max_static_bitrate: Optional[int] = Field(
        default=None, ge=1, description="Max static bitrate (bits/s)"
    )
    max_static_music_bitrate: Optional[int] = Field(
        default=None, ge=1, description="Max static music bitrate (bits/s)"
    )

    @field_validator("transcoding_codecs", mode="before")
    @classmethod
    def split_codecs(cls, v: Any) -> Any:
        return _codec_list(v)

    def to_profile(self) -> DeviceProfile:
        """Convert to the immutable profile consumed by the matcher.

        Returns:
            DeviceProfile instance
        """
        return DeviceProfile(
            name=self.name,
            direct_play_profiles=tuple(
                DirectPlayProfile(type=MediaType(entry.type), audio_codecs=tuple(entry.audio_codecs))
                for entry in self.direct_play
            ),
            transcoding_codecs=tuple(self.transcoding_codecs),
            channel_limits=tuple(
                ChannelLimit(max_channels=limit.max_channels, applies_to_audio=limit.applies_to_audio)
                for limit in self.channel_limits
            ),
            max_static_bitrate=self.max_static_bitrate,
            max_static_music_bitrate=self.max_static_music_bitrate,
        )


class SelectionConfig(BaseModel):
    """Track selection configuration."""

    enabled: bool = Field(default=True, description="Enable automatic track selection")
    preferred_language: str = Field(default="eng", description="Preferred audio language")

    @field_validator("preferred_language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        """Lower-case and trim the language tag."""
        if not v or not v.strip():
            raise ValueError("Preferred language must not be empty")
        return v.strip().lower()


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=9494, description="API port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    format: str = Field(default="text", description="Log format (json or text)")
    level: str = Field(default="info", description="Log level")
    output: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        if v.lower() not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError("Invalid log level")
        return v.lower()


class Config(BaseModel):
    """Main configuration model."""

    selection: SelectionConfig = Field(
        default_factory=SelectionConfig, description="Selection configuration"
    )
    devices: Dict[str, DeviceProfileConfig] = Field(
        default_factory=dict, description="Device profiles keyed by device id"
    )
    api: APIConfig = Field(default_factory=APIConfig, description="API configuration")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        # Substitute environment variables
        raw_config = cls._substitute_env_vars(raw_config)

        return cls(**raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """Recursively substitute environment variables in configuration.

        Replaces ${VAR_NAME} with os.environ['VAR_NAME'].

        Args:
            obj: Configuration object (dict, list, str, etc.)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, dict):
            return {key: Config._substitute_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [Config._substitute_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            pattern = r"\$\{([^}]+)\}"

            def replace_var(match):
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    raise ValueError(
                        f"Environment variable '{var_name}' not found "
                        f"(referenced in configuration)"
                    )
                return value

            return re.sub(pattern, replace_var, obj)
        else:
            return obj

    @classmethod
    def from_defaults(cls) -> "Config":
        """Create configuration with default values.

        Returns:
            Config instance with defaults
        """
        return cls()

    def device_profile(self, device_id: Optional[str]) -> Optional[DeviceProfile]:
        """Look up the profile registered for a device.

        Args:
            device_id: Device identifier (may be None)

        Returns:
            DeviceProfile, or None when no profile is registered
        """
        if not device_id:
            return None
        entry = self.devices.get(device_id)
        return entry.to_profile() if entry else None


def load_config(path: Optional[str | Path] = None) -> Config:
    """Load configuration from file or use defaults.

    Args:
        path: Optional path to configuration file. If None, uses defaults.

    Returns:
        Config instance
    """
    if path is None:
        return Config.from_defaults()

    return Config.from_yaml(path)
