"""Tests for the configuration module."""

from pathlib import Path

import pytest

from vardeps._cli.config import (
    ConfigError,
    VardepsConfig,
    find_pyproject_toml,
    load_config,
)


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml function."""

    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        assert find_pyproject_toml(tmp_path) == pyproject

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")
        subdir = tmp_path / "src" / "pkg"
        subdir.mkdir(parents=True)

        assert find_pyproject_toml(subdir) == pyproject


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_section(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        assert load_config(pyproject) == VardepsConfig(project_root=tmp_path)

    def test_full_section(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.vardeps]
model = "models/plasma.toml"
independent = ["t"]
dependent = ["species.density", "energy"]
""",
        )

        config = load_config(pyproject)

        assert config.model == tmp_path / "models" / "plasma.toml"
        assert config.independent == ("t",)
        assert config.dependent == ("species.density", "energy")
        assert config.project_root == tmp_path

    def test_single_name_string(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[tool.vardeps]\nindependent = "t"\n')

        assert load_config(pyproject).independent == ("t",)

    def test_absolute_model_path(self, tmp_path: Path) -> None:
        model = tmp_path / "elsewhere" / "model.toml"
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f'[tool.vardeps]\nmodel = "{model.as_posix()}"\n')

        assert load_config(pyproject).model == model

    def test_invalid_model_type(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.vardeps]\nmodel = 3\n")

        with pytest.raises(ConfigError, match="model"):
            load_config(pyproject)

    def test_invalid_name_list(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.vardeps]\ndependent = [1, 2]\n")

        with pytest.raises(ConfigError, match="dependent"):
            load_config(pyproject)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.vardeps\n")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(pyproject)
