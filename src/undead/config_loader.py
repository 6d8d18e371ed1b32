"""
Configuration loader - supports YAML files and [tool.undead] in pyproject.toml
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

try:  # py3.11+
    import tomllib as tomli
except ImportError:
    import tomli

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_ROOT_MARKERS = ["setup.py", "pyproject.toml", ".git"]
DEFAULT_SOURCE_SUFFIX = ".py"
DEFAULT_INIT_NAME = "__init__"
# if __name__ == "__main__":
DEFAULT_ENTRYPOINT_PATTERN = r"""if\s+__name__\s*==\s*["']__main__["']\s*:"""

CONFIG_CANDIDATES = [
    "undead.yaml",
    "undead.yml",
    ".undead.yaml",
    ".undead.yml",
    "pyproject.toml",  # only when it carries [tool.undead]
]


@dataclass
class UndeadConfig:
    """Settings shared by every stage of a scan."""
    root_markers: List[str] = field(default_factory=lambda: list(DEFAULT_ROOT_MARKERS))
    source_suffix: str = DEFAULT_SOURCE_SUFFIX
    init_name: str = DEFAULT_INIT_NAME
    # extra ignore patterns, merged with the ones given on the command line
    ignore: List[str] = field(default_factory=list)
    respect_gitignore: bool = True
    # None lets the executor pick its default pool size
    workers: Optional[int] = None
    entrypoint_pattern: str = DEFAULT_ENTRYPOINT_PATTERN

    @property
    def init_filename(self) -> str:
        return f"{self.init_name}{self.source_suffix}"


def load_config(
    config_path: Optional[Path] = None,
    cwd: Optional[Path] = None,
    search_dirs: Iterable[Path] = (),
) -> UndeadConfig:
    """
    Load configuration.

    Args:
        config_path: explicit config file; when None ``cwd`` and ``search_dirs`` are searched
        cwd: directory to search first (defaults to the process working directory)
        search_dirs: further directories searched after ``cwd``, e.g. the project root

    Returns:
        UndeadConfig: the loaded configuration, or defaults when nothing was found
    """
    if config_path:
        return _load_config_file(Path(config_path))

    found = find_config_file(cwd, search_dirs)
    if found:
        logger.debug("using config file %s", found)
        return _load_config_file(found)

    return UndeadConfig()


def find_config_file(cwd: Optional[Path] = None, search_dirs: Iterable[Path] = ()) -> Optional[Path]:
    """Return the first config file found in ``cwd``, then in ``search_dirs``, in priority order."""
    base = Path(cwd) if cwd else Path.cwd()
    for directory in (base, *search_dirs):
        for name in CONFIG_CANDIDATES:
            candidate = Path(directory) / name
            if not candidate.is_file():
                continue
            if candidate.name == "pyproject.toml":
                if _has_undead_config(candidate):
                    return candidate
                continue
            return candidate
    return None


def _load_config_file(config_path: Path) -> UndeadConfig:
    if not config_path.exists():
        raise ConfigError(f"config file does not exist: {config_path}", config_path)

    suffix = config_path.suffix.lower()
    if suffix in [".yaml", ".yml"]:
        return _load_yaml_config(config_path)
    elif suffix == ".toml":
        return _load_toml_config(config_path)
    else:
        raise ConfigError(f"unsupported config file format: {suffix}", config_path)


def _load_yaml_config(config_path: Path) -> UndeadConfig:
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read {config_path}: {e}", config_path) from e

    if not data:
        return UndeadConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping", config_path)
    return _parse_config_data(data, config_path)


def _load_toml_config(config_path: Path) -> UndeadConfig:
    try:
        with config_path.open("rb") as f:
            data = tomli.load(f)
    except (OSError, tomli.TOMLDecodeError) as e:
        raise ConfigError(f"cannot read {config_path}: {e}", config_path) from e

    # pyproject.toml keeps its settings under [tool.undead]
    if "tool" in data and "undead" in data["tool"]:
        config_data = data["tool"]["undead"]
    else:
        config_data = data
    return _parse_config_data(config_data, config_path)


def _has_undead_config(pyproject_path: Path) -> bool:
    try:
        with pyproject_path.open("rb") as f:
            data = tomli.load(f)
    except (OSError, tomli.TOMLDecodeError):
        return False
    return "tool" in data and "undead" in data["tool"]


def _parse_config_data(data: Dict[str, Any], source: Optional[Path] = None) -> UndeadConfig:
    config = UndeadConfig()

    def _expect(key: str, kind: type) -> Any:
        value = data[key]
        if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
            raise ConfigError(f"{source or 'config'}: '{key}' must be {kind.__name__}", source)
        return value

    def _str_list(key: str) -> List[str]:
        value = _expect(key, list)
        if not all(isinstance(item, str) for item in value):
            raise ConfigError(f"{source or 'config'}: '{key}' must be a list of strings", source)
        return list(value)

    if "root_markers" in data:
        config.root_markers = _str_list("root_markers")
    if "ignore" in data:
        config.ignore = _str_list("ignore")
    if "source_suffix" in data:
        suffix = _expect("source_suffix", str)
        config.source_suffix = suffix if suffix.startswith(".") else f".{suffix}"
    if "init_name" in data:
        config.init_name = _expect("init_name", str)
    if "respect_gitignore" in data:
        config.respect_gitignore = _expect("respect_gitignore", bool)
    if "workers" in data and data["workers"] is not None:
        workers = _expect("workers", int)
        if workers < 1:
            raise ConfigError(f"{source or 'config'}: 'workers' must be >= 1", source)
        config.workers = workers
    if "entrypoint_pattern" in data:
        config.entrypoint_pattern = _expect("entrypoint_pattern", str)

    return config


def create_example_config() -> str:
    """Contents of an example undead.yaml"""
    return """# undead configuration
# directories containing any of these mark the project root
root_markers:
  - "setup.py"
  - "pyproject.toml"
  - ".git"

source_suffix: ".py"
init_name: "__init__"

# extra ignore patterns (fnmatch), merged with -I/--ignore-paths
ignore:
  - "**/migrations/**"

respect_gitignore: true
# thread pool size; omit for the executor default
# workers: 8
"""


def save_example_config(output_path: Optional[Path] = None) -> Path:
    """Write the example config and return its path."""
    if output_path is None:
        output_path = Path("undead.yaml")

    output_path.write_text(create_example_config(), encoding="utf-8")
    return output_path
