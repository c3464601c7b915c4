"""Configuration for Morseboard.

Holds the MorseConfig dataclass read by the engine on every event, and saves
and restores it between application launches.
"""
import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Dict, Any

from mb_synth import ToneFrequency
from mb_utils import (CHAR_GAP_UNITS, DASH_UNITS, DEFAULT_ERROR_GLYPH, DEFAULT_WPM,
                      WORD_GAP_UNITS, dit_seconds)

logger = logging.getLogger(__name__)


def validate_wpm(wpm) -> int:
    """Return ``wpm`` if it is a positive integer, else raise ValueError."""
    if isinstance(wpm, bool) or not isinstance(wpm, int):
        raise ValueError(f"WPM must be an integer, got {wpm!r}")
    if wpm <= 0:
        raise ValueError(f"WPM must be positive, got {wpm}")
    return wpm


@dataclass
class MorseConfig:
    """Keyer settings.

    All fields can be changed between events with plain attribute writes;
    the next event or tick sees the new value. ``tone_frequency`` is only
    read when a controller is built, since the tone sample is prepared once.
    """
    wpm: int = DEFAULT_WPM
    sounds_enabled: bool = True
    tone_frequency: ToneFrequency = ToneFrequency.MIDDLE
    auto_space: bool = False
    error_glyph: str = DEFAULT_ERROR_GLYPH

    def __setattr__(self, name, value):
        if name == 'wpm':
            value = validate_wpm(value)
        elif name == 'error_glyph' and not isinstance(value, str):
            raise ValueError(f"Error glyph must be a string, got {value!r}")
        elif name == 'tone_frequency' and not isinstance(value, ToneFrequency):
            value = ToneFrequency.from_name(value)
        super().__setattr__(name, value)

    @property
    def time_unit(self) -> float:
        """Length of one dit in seconds."""
        return dit_seconds(self.wpm)

    @property
    def symbol_threshold(self) -> float:
        """Presses at least this long are dashes."""
        return DASH_UNITS * self.time_unit

    @property
    def char_gap(self) -> float:
        """Idle time that ends a character."""
        return CHAR_GAP_UNITS * self.time_unit

    @property
    def word_gap(self) -> float:
        """Idle time that ends a word."""
        return WORD_GAP_UNITS * self.time_unit


def config_to_dict(cfg: MorseConfig) -> Dict[str, Any]:
    """Serialize a MorseConfig into JSON friendly values."""
    return {
        'wpm': cfg.wpm,
        'sounds_enabled': cfg.sounds_enabled,
        'tone_frequency': cfg.tone_frequency.name,
        'auto_space': cfg.auto_space,
        'error_glyph': cfg.error_glyph,
    }


def config_from_dict(data: Dict[str, Any]) -> MorseConfig:
    """Build a MorseConfig from saved values.

    Missing keys keep their defaults. Invalid values are logged and replaced
    by the default so that a bad config file never stops the application.
    """
    cfg = MorseConfig()
    for key in ('wpm', 'sounds_enabled', 'tone_frequency', 'auto_space', 'error_glyph'):
        if key not in data:
            continue
        value = data[key]
        if key in ('sounds_enabled', 'auto_space') and not isinstance(value, bool):
            logger.warning("Ignoring invalid %s in config: %r", key, value)
            continue
        try:
            setattr(cfg, key, value)
        except ValueError as e:
            logger.warning("Ignoring invalid %s in config: %s", key, e)
    return cfg


CONFIG_ENV_VAR = 'MORSEBOARD_CONFIG'
CONFIG_FILE_NAME = 'morseboard.json'


def get_config_path() -> str:
    """Return where the keyer settings live.

    ``$MORSEBOARD_CONFIG`` names the file directly (handy for a second key
    profile). Otherwise the file sits in the platform's per-user config
    directory. Nothing is created here; ``save_config`` makes the directory.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return os.path.expanduser(override)

    home = os.path.expanduser('~')
    if sys.platform == 'win32':
        base = os.environ.get('APPDATA', os.path.join(home, 'AppData', 'Roaming'))
    elif sys.platform == 'darwin':
        base = os.path.join(home, 'Library', 'Preferences')
    else:
        base = os.environ.get('XDG_CONFIG_HOME') or os.path.join(home, '.config')
    return os.path.join(base, CONFIG_FILE_NAME)


def load_config() -> MorseConfig:
    """Load configuration from disk.

    Returns:
        The saved MorseConfig, or defaults if the file is missing or corrupted.
    """
    config_path = get_config_path()
    if not os.path.exists(config_path):
        return MorseConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not read %s, using defaults: %s", config_path, e)
        return MorseConfig()
    if not isinstance(data, dict):
        logger.warning("Unexpected content in %s, using defaults", config_path)
        return MorseConfig()
    return config_from_dict(data)


def save_config(cfg: MorseConfig) -> None:
    """Save configuration to disk.

    Args:
        cfg: MorseConfig to save.
    """
    config_path = get_config_path()
    try:
        parent = os.path.dirname(config_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(config_path, 'w', encoding='utf-8') as f:
            json.dump(config_to_dict(cfg), indent=2, fp=f, ensure_ascii=False)
    except OSError as e:
        # Losing settings is not worth interrupting the user for
        logger.warning("Could not save config to %s: %s", config_path, e)
