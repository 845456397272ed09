"""
Configuration management for PlayFill.

Loads and validates TOML config against strict bounds.
All tunable refinement parameters are bounded and validated at startup.
"""

import copy
import os
from pathlib import Path
from typing import Dict, Any, Optional
import toml
import logging

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when config validation fails."""
    pass


class Config:
    """Configuration loader and validator."""

    PARAM_BOUNDS = {
        "library": {
            "audio_formats": None,  # List type
        },
        "refine": {
            "depth_percent": (0, 100),
            "steps_percent": (0, 100),
            "passes": (0, 20),
            "max_workers": (1, 64),
            "heuristic": ("greedy", "annealing"),
        },
        "annealing": {
            "initial_temperature": (0.001, 3600.0),
            "cooling_rate": (0.01, 1.0),
        },
        "playback": {
            "command": None,  # List type
        },
    }

    # Counts that must be whole numbers
    INT_PARAMS = {
        ("refine", "passes"),
        ("refine", "max_workers"),
    }

    DEFAULT_CONFIG = {
        "config_version": "1.0",
        "library": {
            "audio_formats": [".mp3", ".wav", ".ogg", ".flac"],
        },
        "refine": {
            "depth_percent": 100,
            "steps_percent": 100,
            "passes": 2,
            "max_workers": 4,
            "heuristic": "greedy",
        },
        "annealing": {
            "initial_temperature": 30.0,
            "cooling_rate": 0.9,
        },
        "playback": {
            "command": ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet"],
        },
    }

    def __init__(self, config_dict: Dict[str, Any]):
        """Initialize config from dictionary."""
        self.data = config_dict
        self._validate()

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """
        Read refinement, library and playback settings from TOML.

        A missing file is not an error: the built-in defaults are used and a
        warning is logged, so a fresh checkout can build playlists straight away.

        Args:
            config_path: Explicit file. Falls back to PLAYFILL_CONFIG_PATH,
                        then configs/playfill.toml.

        Returns:
            Validated Config.

        Raises:
            ConfigError: If the file is not valid TOML or a value is out of bounds.
        """
        path = Path(config_path or os.getenv("PLAYFILL_CONFIG_PATH", "configs/playfill.toml"))

        if not path.exists():
            logger.warning(f"No config at {path}; using built-in defaults")
            return cls.defaults()

        try:
            config_dict = toml.load(path)
        except (toml.TomlDecodeError, OSError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}")

        logger.info(f"Loaded config from {path}")
        return cls(config_dict)

    @classmethod
    def defaults(cls) -> "Config":
        """Config built only from DEFAULT_CONFIG."""
        return cls(copy.deepcopy(cls.DEFAULT_CONFIG))

    def _validate(self) -> None:
        """
        Validate all config parameters against PARAM_BOUNDS.

        Numeric bounds are inclusive ranges, string bounds are the allowed choices.

        Raises:
            ConfigError: If any parameter is out of bounds.
        """
        for section, params in self.PARAM_BOUNDS.items():
            if section not in self.data:
                logger.warning(f"Missing config section: {section}. Using defaults.")
                self.data[section] = copy.deepcopy(self.DEFAULT_CONFIG.get(section, {}))
                continue

            section_data = self.data[section]

            for param, bounds in params.items():
                if param not in section_data:
                    default_val = self.DEFAULT_CONFIG.get(section, {}).get(param)
                    if default_val is not None:
                        logger.warning(f"Missing param {section}.{param}. Using default: {default_val}")
                        section_data[param] = copy.deepcopy(default_val)
                    continue

                value = section_data[param]

                # List types: only the container type is checked
                if bounds is None:
                    if not isinstance(value, list) or not value:
                        raise ConfigError(f"Parameter {section}.{param} must be a non-empty list")
                    continue

                if all(isinstance(b, str) for b in bounds):
                    if value not in bounds:
                        raise ConfigError(
                            f"Parameter {section}.{param}={value!r} not one of {list(bounds)}"
                        )
                    continue

                min_val, max_val = bounds
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ConfigError(f"Parameter {section}.{param}={value!r} is not a number")
                if (section, param) in self.INT_PARAMS and not isinstance(value, int):
                    raise ConfigError(f"Parameter {section}.{param}={value!r} must be an integer")
                if not (min_val <= value <= max_val):
                    raise ConfigError(
                        f"Parameter {section}.{param}={value} out of bounds "
                        f"[{min_val}, {max_val}]"
                    )

        seed = self.data["refine"].get("random_seed")
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise ConfigError(f"Parameter refine.random_seed={seed!r} must be an integer")

        logger.debug("Config validation passed")

    def get(self, section: str, param: str, default: Any = None) -> Any:
        """
        Look up one parameter, e.g. get("playback", "timeout_seconds").

        Optional parameters with no default (refine.random_seed,
        playback.timeout_seconds) return `default` when unset.
        """
        return self.data.get(section, {}).get(param, default)

    def __getitem__(self, section: str) -> Dict[str, Any]:
        """Section dict, mutable in place: config["refine"]["passes"] = 3"""
        return self.data.get(section, {})

    def __repr__(self) -> str:
        refine = self.data.get("refine", {})
        return (
            f"Config(version={self.data.get('config_version', 'unknown')}, "
            f"heuristic={refine.get('heuristic')}, passes={refine.get('passes')})"
        )
