"""Path management for Settings Sync."""

from pathlib import Path

from settings_sync.config.schemas import PathsConfig
from settings_sync.utils.logging import get_logger

logger = get_logger("config.path_manager")

SETTINGS_FILENAME = "settings.json"
PREFERENCES_FILENAME = "settings-sync.preferences.yaml"


class PathManager:
    """Resolves where the settings document and preferences live."""

    def __init__(self, paths: PathsConfig | None = None, *, home: Path | None = None):
        """Initialize the path manager.

        Args:
            paths: Optional configured locations (defaults under ~/.claude)
            home: Optional home directory override (mainly for tests)
        """
        self._paths = paths or PathsConfig()
        self._home = home

    def _home_dir(self) -> Path:
        return self._home if self._home is not None else Path.home()

    def resolve_path(self, path: Path | str) -> Path:
        """Expand ``~`` against the configured home and make the path absolute."""
        path_str = str(path)
        if path_str == "~" or path_str.startswith("~/"):
            return (self._home_dir() / path_str[2:]).resolve()
        return Path(path_str).expanduser().resolve()

    def get_claude_dir(self) -> Path:
        if self._paths.claude_dir is not None:
            return self.resolve_path(self._paths.claude_dir)
        return self._home_dir() / ".claude"

    def get_settings_path(self) -> Path:
        return self.get_claude_dir() / SETTINGS_FILENAME

    def get_preferences_path(self) -> Path:
        if self._paths.preferences_file is not None:
            return self.resolve_path(self._paths.preferences_file)
        return self.get_claude_dir() / PREFERENCES_FILENAME
