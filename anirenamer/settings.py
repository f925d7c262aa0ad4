"""Settings management for AniRenamer."""
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from .formatter import (
    DEFAULT_REGULAR_TEMPLATE,
    DEFAULT_SEASON_FOLDER_TEMPLATE,
    DEFAULT_SPECIAL_FOLDER_TEMPLATE,
    DEFAULT_SPECIAL_TEMPLATE,
    NamingTemplates,
    render_template,
)
from .models import VersioningConfig, VersioningMode

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Where the settings file lives
# ---------------------------------------------------------------------------

APP_DIR_NAME = "AniRenamer"


def settings_dir() -> Path:
    """Return the per-user config directory (it is created on save)."""
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", Path.home())) / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    config_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(config_home) / APP_DIR_NAME


def default_settings_path() -> Path:
    return settings_dir() / "settings.json"


# ---------------------------------------------------------------------------
# Keys and their defaults
# ---------------------------------------------------------------------------

DEFAULT_SETTINGS: dict[str, Any] = {
    # File and folder naming
    "regular_template": DEFAULT_REGULAR_TEMPLATE,
    "special_template": DEFAULT_SPECIAL_TEMPLATE,
    "season_folder_template": DEFAULT_SEASON_FOLDER_TEMPLATE,
    "special_folder_template": DEFAULT_SPECIAL_FOLDER_TEMPLATE,

    # Catalog access (the environment / .env wins when these are empty)
    "tvdb_api_key": "",
    "tvdb_pin": "",
    "tvdb_language": "eng",
    "season_type": "default",

    # Planning and execution
    "versioning_mode": VersioningMode.TEMPORARY.value,
    "write_log": True,
    "log_file": "rename_log.txt",
}

# Variables each kind of template may use
EPISODE_TEMPLATE_VARIABLES = ("series", "season", "episode", "title")
FOLDER_TEMPLATE_VARIABLES = ("season",)


class Settings:
    """User settings stored as JSON, layered over ``DEFAULT_SETTINGS``.

    Only keys that were explicitly set are written back, so changing a
    default in a later release reaches existing users.

    Usage:
        settings = Settings()
        settings.set("versioning_mode", "direct")
        settings.save()
    """

    def __init__(self, path: Path | None = None):
        self.path = path or default_settings_path()
        self._values: dict[str, Any] = self._read()

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._values:
            return self._values[key]
        return DEFAULT_SETTINGS.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def save(self) -> bool:
        """Write explicitly set keys; False if the file could not be written."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(self._values, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            log.warning(f"Could not save settings to {self.path}: {e}")
            return False
        return True

    def all(self) -> dict[str, Any]:
        """Effective settings: defaults overridden by saved values."""
        return {**DEFAULT_SETTINGS, **self._values}

    def reload(self) -> None:
        self._values = self._read()

    def naming_templates(self) -> NamingTemplates:
        return NamingTemplates(
            regular=self.get("regular_template"),
            special=self.get("special_template"),
            season_folder=self.get("season_folder_template"),
            special_folder=self.get("special_folder_template"),
        )

    def versioning(self) -> VersioningConfig:
        mode = self.get("versioning_mode")
        try:
            return VersioningConfig(mode=VersioningMode(mode))
        except ValueError:
            log.warning(f"Unknown versioning mode '{mode}', using temporary")
            return VersioningConfig()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning(f"Ignoring unreadable settings file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}


# ---------------------------------------------------------------------------
# Template checks
# ---------------------------------------------------------------------------

def get_sample_data(variables: tuple[str, ...] = EPISODE_TEMPLATE_VARIABLES) -> dict[str, Any]:
    """Sample values for the given template variables."""
    sample = {
        "series": "Sousou.no.Frieren",
        "season": 1,
        "episode": 5,
        "title": "Phantoms.of.the.Dead",
    }
    return {key: sample[key] for key in variables}


def validate_template(template: str, folder: bool = False) -> tuple[bool, str]:
    """
    Check that a template renders with the variables it will be given.

    Args:
        template: Template string
        folder: True for folder templates, which only get ``{season}``

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not template or not template.strip():
        return False, "Template cannot be empty"

    variables = FOLDER_TEMPLATE_VARIABLES if folder else EPISODE_TEMPLATE_VARIABLES
    try:
        rendered = render_template(template, get_sample_data(variables))
    except KeyError as e:
        return False, f"Unknown variable: {e}"
    if not rendered.strip():
        return False, "Template produced empty result"
    return True, ""
