"""Load [tool.coupling-detector] from pyproject.toml or a dedicated TOML file. Infrastructure I/O only."""

import logging
import sys
from pathlib import Path
from typing import Optional

if sys.version_info >= (3, 11):
    import tomllib as toml_lib
else:
    import tomli as toml_lib

from coupling_detector.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

TOOL_SECTION = "coupling-detector"


class ConfigFileLoader:
    """Loads the detector table from TOML files."""

    @staticmethod
    def _read(config_file: Path) -> dict[str, object]:
        try:
            with config_file.open("rb") as f:
                return toml_lib.load(f)
        except toml_lib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid TOML in {config_file}: {exc}") from exc

    @staticmethod
    def _section(data: dict[str, object]) -> Optional[dict[str, object]]:
        tool_section = data.get("tool", {}) or {}
        if isinstance(tool_section, dict) and TOOL_SECTION in tool_section:
            section = tool_section[TOOL_SECTION]
        elif TOOL_SECTION in data:
            section = data[TOOL_SECTION]
        else:
            return None
        if not isinstance(section, dict):
            raise ConfigurationError(f"[{TOOL_SECTION}] must be a table.")
        return section

    @classmethod
    def load_config_file(cls, path: str) -> dict[str, object]:
        """Load an explicit file. Accepts [tool.coupling-detector], [coupling-detector] or top-level keys."""
        config_file = Path(path)
        if not config_file.is_file():
            raise ConfigurationError(f"Configuration file not found: {path}")
        data = cls._read(config_file)
        section = cls._section(data)
        return section if section is not None else data

    @classmethod
    def load_config_from_fs(cls, start: Optional[str] = None) -> dict[str, object]:
        """Walk up from `start` (default: cwd) to the first pyproject.toml carrying the table."""
        current_path = Path(start).resolve() if start else Path.cwd()
        for directory in (current_path, *current_path.parents):
            config_file = directory / "pyproject.toml"
            if not config_file.is_file():
                continue
            try:
                section = cls._section(cls._read(config_file))
            except OSError:
                continue
            if section is not None:
                logger.debug("Loaded configuration from %s", config_file)
                return section
        return {}
