"""
File-based settings sources for chunkwright configuration.

These Pydantic settings sources load configuration data from YAML, TOML and
JSON files. ``source_for_path`` picks the source class from the file suffix.
"""

import json
import tomllib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, Union

import yaml
from loguru import logger
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from ..exceptions import ConfigurationError

CONFIG_NAMES = [
    'chunkwright.yaml',
    'chunkwright.yml',
    'chunkwright.toml',
    'chunkwright.json',
    '.chunkwright.yaml',
    '.chunkwright.yml',
    '.chunkwright.toml',
    '.chunkwright.json',
]


class BaseFileConfigSettingsSource(PydanticBaseSettingsSource, ABC):
    """
    Abstract base class for file-based configuration sources.

    Later files override earlier ones. With ``strict=True`` a missing or
    unreadable file raises ``ConfigurationError``; otherwise it is logged and
    skipped.
    """

    def __init__(
        self,
        settings_cls: Type[BaseSettings],
        config_file: Union[str, Path, List[Union[str, Path]]],
        strict: bool = False
    ):
        super().__init__(settings_cls)

        if isinstance(config_file, (str, Path)):
            self.config_files = [Path(config_file)]
        else:
            self.config_files = [Path(f) for f in config_file]

        self.strict = strict
        self._data = self._load_files()

    def _load_files(self) -> Dict[str, Any]:
        """Load and merge data from all configuration files."""
        merged_data: Dict[str, Any] = {}

        for config_file in self.config_files:
            if not config_file.exists():
                if self.strict:
                    raise ConfigurationError(
                        "config_file", str(config_file), "Config file not found"
                    )
                logger.warning(f"Config file {config_file} not found")
                continue

            try:
                file_data = self.load_file(config_file)
            except (OSError, ValueError, yaml.YAMLError) as e:
                if self.strict:
                    raise ConfigurationError(
                        "config_file", str(config_file), f"Failed to load config file: {e}"
                    ) from e
                logger.warning(f"Failed to load config file {config_file}: {e}")
                continue

            if file_data:
                merged_data.update(file_data)

        return merged_data

    @abstractmethod
    def load_file(self, path: Path) -> Dict[str, Any]:
        """Load configuration data from a specific file."""

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> Tuple[Any, str, bool]:
        """Get field value from configuration data."""
        if field_name in self._data:
            return self._data[field_name], field_name, True
        return None, field_name, False

    def __call__(self) -> Dict[str, Any]:
        """Return the loaded configuration data."""
        return self._data

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(config_files={[str(f) for f in self.config_files]})'


class YamlConfigSettingsSource(BaseFileConfigSettingsSource):
    """Configuration source for YAML files."""

    def load_file(self, path: Path) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}


class TomlConfigSettingsSource(BaseFileConfigSettingsSource):
    """Configuration source for TOML files."""

    def load_file(self, path: Path) -> Dict[str, Any]:
        with open(path, 'rb') as f:
            return tomllib.load(f)


class JsonConfigSettingsSource(BaseFileConfigSettingsSource):
    """Configuration source for JSON files."""

    def load_file(self, path: Path) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}


_SOURCES_BY_SUFFIX: Dict[str, Type[BaseFileConfigSettingsSource]] = {
    '.yaml': YamlConfigSettingsSource,
    '.yml': YamlConfigSettingsSource,
    '.toml': TomlConfigSettingsSource,
    '.json': JsonConfigSettingsSource,
}


def source_for_path(
    settings_cls: Type[BaseSettings],
    config_file: Union[str, Path],
    strict: bool = False
) -> BaseFileConfigSettingsSource:
    """Create the settings source matching a config file's suffix.

    Raises:
        ConfigurationError: If the suffix is not a supported format
    """
    path = Path(config_file)
    source_cls = _SOURCES_BY_SUFFIX.get(path.suffix.lower())
    if source_cls is None:
        raise ConfigurationError(
            "config_file", str(path), "Unknown config file format (expected .yaml, .yml, .toml or .json)"
        )
    return source_cls(settings_cls, path, strict=strict)


def find_config_files(
    base_dirs: Optional[List[Union[str, Path]]] = None,
    config_names: Optional[List[str]] = None,
) -> List[Path]:
    """
    Find configuration files in common locations.

    Args:
        base_dirs: Directories to search (defaults to the working directory
            and ``~/.config/chunkwright``)
        config_names: Config file names to look for

    Returns:
        List of found configuration files, lowest priority first
    """
    if base_dirs is None:
        dirs = [
            Path.home() / '.config' / 'chunkwright',
            Path.cwd(),
        ]
    else:
        dirs = [Path(d) for d in base_dirs]

    names = config_names or CONFIG_NAMES
    found_files = []

    for base_dir in dirs:
        if not base_dir.exists():
            continue

        for config_name in names:
            config_path = base_dir / config_name
            if config_path.is_file():
                found_files.append(config_path)

    return found_files
