"""
Tuner configuration loaded from YAML.

Values in the file are merged over the defaults below; see
``configs/default.yaml`` for a complete example.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .dsp_core.fft import is_power_of_two
from .errors import ConfigError
from .pitch.resolver import DEFAULT_TOLERANCE_HZ
from .types import ReferencePitch, STANDARD_TUNING

DEFAULT_SAMPLE_RATE = 44100
DEFAULT_FRAME_SIZE = 4096


@dataclass(frozen=True)
class TunerConfig:
    """Settings shared by the capture sources, the resolver and the controller."""
    sample_rate: int = DEFAULT_SAMPLE_RATE
    # None: derive from the capture device
    frame_size: Optional[int] = DEFAULT_FRAME_SIZE
    tolerance_hz: float = DEFAULT_TOLERANCE_HZ
    full_spectrum: bool = False
    stop_timeout: float = 2.0
    reference_pitches: Tuple[ReferencePitch, ...] = field(default=STANDARD_TUNING)
    log_file: Optional[str] = None
    log_level: str = 'INFO'

    def __post_init__(self):
        validate_config(self)

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    def with_frame_size(self, frame_size: int) -> 'TunerConfig':
        return replace(self, frame_size=frame_size)


def validate_config(config: TunerConfig) -> None:
    """Raise ConfigError on out-of-range values."""
    if config.sample_rate <= 0:
        raise ConfigError(f"sample_rate must be positive, got {config.sample_rate}")
    if config.frame_size is not None:
        if config.frame_size < 2 or not is_power_of_two(config.frame_size):
            raise ConfigError(f"frame_size must be a power of two >= 2, got {config.frame_size}")
    if config.tolerance_hz <= 0:
        raise ConfigError(f"tolerance_hz must be positive, got {config.tolerance_hz}")
    if config.stop_timeout < 0:
        raise ConfigError(f"stop_timeout must be >= 0, got {config.stop_timeout}")
    if not config.reference_pitches:
        raise ConfigError("reference_pitches must not be empty")
    if not isinstance(config.log_level, str):
        raise ConfigError(f"log_level must be a level name, got {config.log_level!r}")
    if not isinstance(config.log_level_value, int):
        raise ConfigError(f"Unknown log_level: {config.log_level}")


def _parse_pitches(raw: Any) -> Tuple[ReferencePitch, ...]:
    if not isinstance(raw, list):
        raise ConfigError("reference_pitches must be a list")
    pitches = []
    for entry in raw:
        try:
            pitches.append(ReferencePitch(str(entry['label']), float(entry['frequency'])))
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid reference pitch entry {entry!r}: {e}") from e
    return tuple(pitches)


def config_from_dict(data: Dict[str, Any]) -> TunerConfig:
    """Build a TunerConfig from a plain mapping (unknown keys are rejected)."""
    data = dict(data or {})
    known = set(TunerConfig.__dataclass_fields__)
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown config keys: {sorted(unknown)}")

    if 'reference_pitches' in data:
        data['reference_pitches'] = _parse_pitches(data['reference_pitches'])
    if data.get('frame_size') == 'auto':
        data['frame_size'] = None

    try:
        return TunerConfig(**data)
    except TypeError as e:
        raise ConfigError(str(e)) from e


def load_config(config_path: Union[str, Path, None] = None) -> TunerConfig:
    """
    Load a YAML configuration file.

    Args:
        config_path: Path to the YAML file. None returns the defaults.

    Returns:
        Validated TunerConfig
    """
    if config_path is None:
        return TunerConfig()

    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(path, 'r') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {path}: {e}") from e

    if data is None:
        return TunerConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping")
    return config_from_dict(data)
