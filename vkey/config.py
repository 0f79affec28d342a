"""Configuration loader and validator for VKey.

Provides ``load_config(path)`` which reads a JSON config (with
comment and trailing-comma tolerant sanitizer) and merges user
overrides from ``~/.config/vkey/config.json``.

Also provides ``validate_config(conf)`` which normalizes and
validates config keys, raising ``ConfigError`` (a ``ValueError``)
on invalid values.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile

from vkey.core.errors import ConfigError
from vkey.core.types import OutputEncoding, Scheme

logger = logging.getLogger(__name__)

USER_CONFIG_PATH = '~/.config/vkey/config.json'

# Single source of truth for default configuration
DEFAULT_CONFIG: dict = {
    'scheme': 'Telex',
    'default_encoding': 'Unicode',
    'per_app_encoding_overrides': {},
    'remember_encoding': True,
    'vietnamese_mode': True,
    'auto_mode_switch_enabled': False,
    'auto_mode_switch_threshold': 3,
    'modern_tone_style': True,
    'backspace_mode': 'keystroke',
    'escape_restores_raw': False,
    'max_syllable_keys': 12,
    'context_capacity': 16,
    'toggle_hotkey': 'ctrl+space',
    'debug': False,
}

BOOL_KEYS = (
    'remember_encoding',
    'vietnamese_mode',
    'auto_mode_switch_enabled',
    'modern_tone_style',
    'escape_restores_raw',
    'debug',
)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _sanitize_json_text(s: str) -> str:
    """Remove ``#``/``//`` comments and trailing commas from JSON-like text."""
    import re

    # Hash-style line comments
    s = re.sub(r"^[ \t]*#.*$", "", s, flags=re.MULTILINE)
    # C++-style line comments
    s = re.sub(r"//.*$", "", s, flags=re.MULTILINE)
    # Trailing commas before } or ]
    s = re.sub(r",\s*(\}|\])", r"\1", s)
    return s


def save_json(path: str, data: dict) -> None:
    """Write *data* to a temp file beside *path*, then rename it into place."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        'w', encoding='utf-8', dir=directory, suffix='.json.tmp', delete=False,
    )
    try:
        with tmp:
            json.dump(data, tmp, ensure_ascii=False, indent=2)
        os.replace(tmp.name, path)
    except BaseException:
        if os.path.exists(tmp.name):
            os.unlink(tmp.name)
        raise


def _int_in_range(conf: dict, key: str, low: int, high: int | None = None) -> int:
    raw = conf.get(key, DEFAULT_CONFIG[key])
    if isinstance(raw, bool):
        raise ConfigError(f"Invalid {key!r}: {raw}")
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid {key!r}: {raw}")
    if value < low or (high is not None and value > high):
        bound = f"between {low} and {high}" if high is not None else f">= {low}"
        raise ConfigError(f"Invalid {key!r}: {raw} (must be {bound})")
    return value


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------

def validate_config(conf: dict | None) -> dict:
    """Validate and normalize configuration dictionary.

    Returns a normalized dict with all expected keys; scheme and encoding
    names are returned in their canonical spelling.
    Raises ``ConfigError`` on invalid values.
    """
    if conf is None:
        conf = {}

    out = dict(DEFAULT_CONFIG)

    # scheme: Telex | VNI | VIQR
    scheme = conf.get('scheme', DEFAULT_CONFIG['scheme'])
    try:
        out['scheme'] = Scheme.parse(scheme).value
    except ValueError:
        raise ConfigError(f"Invalid 'scheme': {scheme!r} (expected Telex, VNI or VIQR)")

    # default_encoding: Unicode | TCVN3 | VNI-Win
    enc = conf.get('default_encoding', DEFAULT_CONFIG['default_encoding'])
    try:
        out['default_encoding'] = OutputEncoding.parse(enc).value
    except ValueError:
        raise ConfigError(f"Invalid 'default_encoding': {enc!r}")

    # per_app_encoding_overrides: {app_id: encoding}
    overrides = conf.get('per_app_encoding_overrides', {})
    if not isinstance(overrides, dict):
        raise ConfigError("Invalid 'per_app_encoding_overrides': must be an object")
    normalized: dict[str, str] = {}
    for app, app_enc in overrides.items():
        if not isinstance(app, str) or not app:
            raise ConfigError(f"Invalid application id in overrides: {app!r}")
        try:
            normalized[app] = OutputEncoding.parse(app_enc).value
        except ValueError:
            raise ConfigError(f"Invalid encoding for {app!r}: {app_enc!r}")
    out['per_app_encoding_overrides'] = normalized

    for key in BOOL_KEYS:
        value = conf.get(key, DEFAULT_CONFIG[key])
        if not isinstance(value, bool):
            raise ConfigError(f"Invalid {key!r}: must be boolean")
        out[key] = value

    out['auto_mode_switch_threshold'] = _int_in_range(conf, 'auto_mode_switch_threshold', 0)
    out['max_syllable_keys'] = _int_in_range(conf, 'max_syllable_keys', 1, 64)
    out['context_capacity'] = _int_in_range(conf, 'context_capacity', 1)

    # backspace_mode: keystroke | character
    bsm = conf.get('backspace_mode', DEFAULT_CONFIG['backspace_mode'])
    if bsm not in ('keystroke', 'character'):
        raise ConfigError(f"Invalid 'backspace_mode': {bsm!r} (expected 'keystroke' or 'character')")
    out['backspace_mode'] = bsm

    # toggle_hotkey: non-empty string such as "ctrl+space"
    hotkey = conf.get('toggle_hotkey', DEFAULT_CONFIG['toggle_hotkey'])
    if not isinstance(hotkey, str) or not hotkey.strip('+ '):
        raise ConfigError("Invalid 'toggle_hotkey': must be a non-empty string")
    out['toggle_hotkey'] = hotkey

    return out


def _read_and_merge(path: str, target_config: dict, debug: bool = False) -> bool:
    """Read a JSON file, validate, and merge into *target_config*.

    Returns True on success, False on any error.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = f.read()
    except OSError:
        return False

    try:
        cfg = json.loads(raw)
    except json.JSONDecodeError:
        try:
            cfg = json.loads(_sanitize_json_text(raw))
        except json.JSONDecodeError as exc:
            logger.warning("JSON parse error in %s: %s", path, exc)
            return False

    if not isinstance(cfg, dict):
        logger.warning("Config %s is not a JSON object", path)
        return False

    try:
        validated = validate_config(cfg)
    except ConfigError as verr:
        logger.warning("Invalid config %s: %s", path, verr)
        return False

    # Only override keys explicitly present in source
    for k in cfg:
        if k in validated:
            target_config[k] = validated[k]
        elif debug:
            logger.debug("Unknown config key %r in %s ignored", k, path)
    return True


# ------------------------------------------------------------------
# Top-level loader
# ------------------------------------------------------------------

def load_config(config_path: str | None = None, debug: bool = False) -> dict:
    """Load and merge configuration.

    If *config_path* is given, uses only that file (returns defaults if
    the file does not exist).  Otherwise falls back to
    ``~/.config/vkey/config.json``.

    Returns the effective configuration dict (always has all default keys).
    """
    config = dict(DEFAULT_CONFIG)
    config['per_app_encoding_overrides'] = {}

    path = config_path if config_path is not None else os.path.expanduser(USER_CONFIG_PATH)
    if os.path.exists(path):
        _read_and_merge(path, config, debug=debug)
    return config


# ------------------------------------------------------------------
# ConfigManager
# ------------------------------------------------------------------

class ConfigManager:
    """Centralized configuration management with load/save/validate."""

    def __init__(self, config_path: str | None = None, debug: bool = False):
        self._config_path = config_path or os.path.expanduser(USER_CONFIG_PATH)
        self._debug = debug
        self._config: dict = dict(DEFAULT_CONFIG)
        self._load_config()

    # -- internal -------------------------------------------------------

    def _load_config(self) -> None:
        """Reset to defaults, then overlay from file (if exists)."""
        self._config = load_config(self._config_path, debug=self._debug)

    # -- public ---------------------------------------------------------

    def reload(self) -> bool:
        """Reload configuration from file. Returns True on success."""
        try:
            self._load_config()
            return True
        except OSError as exc:
            logger.warning("Config reload failed: %s", exc)
            return False

    def save(self, target_path: str | None = None) -> bool:
        """Atomically save configuration to file. Returns True on success."""
        save_path = target_path or self._config_path
        try:
            save_json(save_path, self.get_all())
            return True
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Config save to %s failed: %s", save_path, exc)
            return False

    def get(self, key: str, default=None):
        """Get a single configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value) -> None:
        """Set a single configuration value."""
        self._config[key] = value

    def update(self, updates: dict) -> None:
        """Update multiple configuration values."""
        self._config.update(updates)

    def remember_app_encoding(self, app_id: str, encoding: str) -> None:
        """Record the output encoding chosen for one application."""
        overrides = dict(self._config.get('per_app_encoding_overrides') or {})
        overrides[app_id] = encoding
        self._config['per_app_encoding_overrides'] = overrides

    def get_all(self) -> dict:
        """Return all configuration (excluding internal keys)."""
        return {k: v for k, v in self._config.items() if not k.startswith('_')}

    def reset_to_defaults(self) -> None:
        """Reset configuration to DEFAULT_CONFIG."""
        self._config = dict(DEFAULT_CONFIG)
        self._config['per_app_encoding_overrides'] = {}

    def validate(self) -> bool:
        """Validate current configuration. Returns True if valid."""
        try:
            validate_config(self._config)
            return True
        except ConfigError:
            return False

    @property
    def config_path(self) -> str:
        """Current config file path."""
        return self._config_path
