"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from vardeps._errors import VardepsError


class ConfigError(VardepsError):
    """Error in vardeps configuration."""


@dataclass(slots=True, frozen=True)
class VardepsConfig:
    """Configuration loaded from pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    model: Path | None = None
    independent: tuple[str, ...] = field(default_factory=tuple)
    dependent: tuple[str, ...] = field(default_factory=tuple)
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _parse_name_list(section: dict[str, object], key: str) -> tuple[str, ...]:
    value = section.get(key, [])
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        msg = f"Invalid [tool.vardeps].{key}: expected string or list of strings"
        raise ConfigError(msg)
    return tuple(value)


def load_config(pyproject_path: Path) -> VardepsConfig:
    """Load and validate [tool.vardeps] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed VardepsConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("vardeps", {})
    if not section:
        return VardepsConfig(project_root=project_root)

    if not isinstance(section, dict):
        msg = "Invalid [tool.vardeps] configuration: expected a table"
        raise ConfigError(msg)

    model_path: Path | None = None
    if "model" in section:
        model_value = section["model"]
        if not isinstance(model_value, str):
            msg = "Invalid [tool.vardeps].model: expected string path"
            raise ConfigError(msg)
        model_path = Path(model_value)
        if not model_path.is_absolute():
            model_path = project_root / model_path

    return VardepsConfig(
        model=model_path,
        independent=_parse_name_list(section, "independent"),
        dependent=_parse_name_list(section, "dependent"),
        project_root=project_root,
    )


def get_config() -> VardepsConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        VardepsConfig (may be empty if no pyproject.toml or no [tool.vardeps] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return VardepsConfig()
    return load_config(pyproject_path)
