"""Tests for the vardeps command line interface."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from vardeps._cli.main import app

runner = CliRunner()


def variable_column(output: str, column: int = 2) -> list[str]:
    """Extract one column of the body rows of a rendered Rich table."""
    rows = [line.split("│") for line in output.splitlines() if line.startswith("│")]
    return [row[column].strip() for row in rows]


MODEL = """
inputs = ["t"]

[variables]
dx = 0.5
x = "t * dx"
unrelated = "t + 1"

[[blocks]]
name = "species"

[blocks.variables]
density = "x * 2"
"""


@pytest.fixture
def model_file(tmp_path: Path) -> Path:
    path = tmp_path / "model.toml"
    path.write_text(MODEL)
    return path


class TestOrderCommand:
    def test_prints_update_order(self, model_file: Path) -> None:
        result = runner.invoke(app, ["order", str(model_file), "-i", "t", "-d", "species.density"])

        assert result.exit_code == 0, result.output
        assert "species.density" in result.output
        assert "unrelated" not in result.output
        assert variable_column(result.output) == ["t", "x", "species.density"]

    def test_nothing_to_update(self, model_file: Path) -> None:
        result = runner.invoke(app, ["order", str(model_file), "-i", "t", "-d", "dx"])

        assert result.exit_code == 0, result.output
        assert "Nothing to update" in result.output

    def test_unknown_variable(self, model_file: Path) -> None:
        result = runner.invoke(app, ["order", str(model_file), "-i", "nope", "-d", "x"])

        assert result.exit_code == 1
        assert "Unknown variable 'nope'" in result.output

    def test_invalid_model(self, tmp_path: Path) -> None:
        path = tmp_path / "model.toml"
        path.write_text('[variables]\nx = "y +"\n')

        result = runner.invoke(app, ["order", str(path), "-d", "x"])

        assert result.exit_code == 1
        assert "Invalid" in result.output

    def test_uses_config_defaults(self, tmp_path: Path, model_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.vardeps]\nmodel = "model.toml"\nindependent = ["t"]\ndependent = ["x"]\n',
        )
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["order"])

        assert result.exit_code == 0, result.output
        assert "species.density" not in result.output
        assert variable_column(result.output) == ["t", "x"]

    def test_missing_model(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["order", "-d", "x"])

        assert result.exit_code == 1
        assert "No model file" in result.output


class TestGraphCommand:
    def test_lists_nodes(self, model_file: Path) -> None:
        result = runner.invoke(app, ["graph", str(model_file)])

        assert result.exit_code == 0, result.output
        assert "species.density" in result.output
        assert "Total: 4 nodes" in result.output
        assert variable_column(result.output, column=1) == ["t", "x", "unrelated", "species.density"]
