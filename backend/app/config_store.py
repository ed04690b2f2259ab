"""Config store: env settings layered under an optional config file and runtime overrides."""
import json
import logging
import threading
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML or JSON config file into a flat dict. Missing or invalid files give {}."""
    if not path.exists():
        logger.debug("Config file not found: %s (optional; using env/defaults)", path)
        return {}
    try:
        raw = path.read_text()
    except OSError as e:
        logger.warning("Could not read config file %s: %s", path, e)
        return {}

    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(raw)
        elif suffix == ".json":
            data = json.loads(raw)
        else:
            logger.warning("Config file must be .yaml, .yml, or .json: %s", path)
            return {}
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file must contain a mapping; got %s", type(data).__name__)
        return {}
    return data


class ConfigStore:
    """
    Builds the Settings snapshot.
    Precedence: runtime overrides > config file > env > defaults.
    """

    def __init__(self, settings_cls: type, config_file_path: Optional[str] = None):
        self._settings_cls = settings_cls
        self._file_path: Optional[Path] = (
            Path(config_file_path).expanduser().resolve() if config_file_path else None
        )
        self._overrides: dict[str, Any] = {}
        self._current: Optional[Any] = None
        self._lock = threading.RLock()

    def _build(self) -> Any:
        env_values = self._settings_cls().model_dump()
        file_values = read_config_file(self._file_path) if self._file_path else {}
        if file_values:
            logger.info("Loaded config file (master over env): %s", self._file_path)
        return self._settings_cls(**{**env_values, **file_values, **self._overrides})

    def load_initial(self) -> None:
        """Build the first snapshot. Call once at startup."""
        with self._lock:
            self._current = self._build()

    def get_settings(self) -> Any:
        """Return the current snapshot, loading it on first use."""
        with self._lock:
            if self._current is None:
                self._current = self._build()
            return self._current

    def update(self, overrides: dict[str, Any]) -> None:
        """Apply runtime overrides. An invalid override keeps the previous snapshot."""
        with self._lock:
            previous = dict(self._overrides)
            self._overrides.update(overrides)
            try:
                self._current = self._build()
            except Exception as e:
                self._overrides = previous
                logger.warning("Config update rejected; keeping previous config: %s", e)

    def reload_from_file(self) -> None:
        """Re-read env and config file, keeping runtime overrides."""
        with self._lock:
            try:
                self._current = self._build()
            except Exception as e:
                logger.warning("Config reload failed; keeping previous config: %s", e)

    def clear_overrides(self) -> None:
        """Drop runtime overrides."""
        with self._lock:
            self._overrides.clear()
            self._current = self._build()
