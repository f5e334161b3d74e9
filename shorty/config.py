import copy
import json
import logging
from pathlib import Path
from typing import Dict, Any, List, Tuple

from shorty.errors import ConfigError
from shorty.paths import DEFAULT_ALIASES_FILE, get_shorty_dir

logger = logging.getLogger(__name__)


class Config:
    """Manage shorty configuration and themes"""

    THEMES = {
        "default": {
            "name_color": "cyan",
            "command_color": "green",
            "note_color": "dim",
            "tags_color": "yellow",
        },
        "ocean": {
            "name_color": "bright_blue",
            "command_color": "cyan",
            "note_color": "blue",
            "tags_color": "bright_cyan",
        },
        "forest": {
            "name_color": "bright_green",
            "command_color": "green",
            "note_color": "dim",
            "tags_color": "bright_yellow",
        },
        "monochrome": {
            "name_color": "bright_white",
            "command_color": "white",
            "note_color": "dim",
            "tags_color": "white",
        },
    }

    DEFAULT_CONFIG = {
        "backup": {
            "auto_backup": True,
            "max_backups": 10,
        },
        "display": {
            "theme": "default",
            "show_line_numbers": False,
            "truncate_commands": True,
            "max_command_length": 50,
        },
        "search": {
            "fuzzy_matching": False,
            "fuzzy_threshold": 70,
            "case_sensitive": False,
            "search_in_notes": True,
            "search_in_tags": True,
        },
        "aliases": {
            "file_path": DEFAULT_ALIASES_FILE,
            "validate_on_add": True,
        },
    }

    def __init__(self, config_dir: Path = None):
        self.config_dir = config_dir or get_shorty_dir()
        self.config_path = self.config_dir / "config.json"
        self.config = self.load()

    def load(self) -> Dict[str, Any]:
        """Load configuration from file, merged over the defaults"""
        config = copy.deepcopy(self.DEFAULT_CONFIG)
        if not self.config_path.exists():
            return config

        try:
            with open(self.config_path, "r") as f:
                user_config = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable config %s: %s", self.config_path, e)
            return config

        if not isinstance(user_config, dict):
            return config
        for section, values in user_config.items():
            if section in config and isinstance(values, dict):
                config[section].update(values)
        return config

    def save(self) -> None:
        """Save configuration to file"""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            json.dump(self.config, f, indent=2)

    def keys(self) -> List[str]:
        """Every dotted key the configuration knows about"""
        return [
            f"{section}.{key}"
            for section, values in self.DEFAULT_CONFIG.items()
            for key in values
        ]

    def items(self) -> List[Tuple[str, Any]]:
        return [(key, self.get(key)) for key in self.keys()]

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dotted key, e.g. 'backup.max_backups'"""
        section, _, name = key.partition(".")
        values = self.config.get(section)
        if not isinstance(values, dict) or name not in values:
            return default
        return values[name]

    def set(self, key: str, value: Any) -> None:
        """Set configuration value, coercing strings to the default's type"""
        section, _, name = key.partition(".")
        if section not in self.DEFAULT_CONFIG or name not in self.DEFAULT_CONFIG[section]:
            raise ConfigError(f"Unknown configuration key: {key}")

        default = self.DEFAULT_CONFIG[section][name]
        if isinstance(value, str):
            value = self._coerce(key, value, default)
        if key == "display.theme" and value not in self.THEMES:
            raise ConfigError(f"Unknown theme '{value}'. Available: {', '.join(self.THEMES)}")

        self.config[section][name] = value
        self.save()

    def reset(self) -> None:
        """Restore and persist the defaults"""
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.save()

    def get_theme(self) -> Dict[str, str]:
        """Get current theme colors"""
        theme_name = self.get("display.theme", "default")
        return self.THEMES.get(theme_name, self.THEMES["default"])

    @staticmethod
    def _coerce(key: str, value: str, default: Any) -> Any:
        if isinstance(default, bool):
            lowered = value.strip().lower()
            if lowered in ("true", "yes", "1", "on"):
                return True
            if lowered in ("false", "no", "0", "off"):
                return False
            raise ConfigError(f"Invalid boolean value for {key}: '{value}'. Use true or false")
        if isinstance(default, int):
            try:
                return int(value)
            except ValueError:
                raise ConfigError(f"Invalid number for {key}: '{value}'")
        return value
