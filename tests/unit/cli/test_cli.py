"""
Unit Tests for the appforge CLI
"""
from io import StringIO
from unittest.mock import patch

import pytest
from rich.console import Console

from conftest import FakeGateway
from appforge.cli.main import create_parser, main
from appforge.core.services import build_services


@pytest.fixture
def cli(tmp_path):
    """Run main() against a temporary store; returns (run, output)"""
    output = StringIO()
    gateway = FakeGateway()

    def fake_build_services(config):
        config = config.model_copy(update={"STORAGE_BASE_DIR": str(tmp_path / "projects")})
        return build_services(config, gateway=gateway)

    def run(*argv):
        output.seek(0)
        output.truncate()
        with patch("appforge.cli.main.build_services", side_effect=fake_build_services), \
                patch("appforge.cli.main.console", Console(file=output, width=200)):
            code = main(list(argv))
        return code, output.getvalue()

    return run


class TestParser:
    """Tests for argument parsing"""

    def test_generate_arguments(self):
        args = create_parser().parse_args([
            "generate", "a habit tracker", "--framework", "react-native",
            "--feature", "streaks", "--feature", "reminders",
        ])

        assert args.command == "generate"
        assert args.framework == "react-native"
        assert args.features == ["streaks", "reminders"]
        assert args.project_type == "app"

    def test_invalid_framework(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["generate", "x", "--framework", "flutter"])

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()


class TestCommands:
    """Tests for CLI commands end to end"""

    def test_projects_empty(self, cli):
        code, out = cli("projects")

        assert code == 0
        assert "No projects yet" in out

    def test_generate_then_inspect(self, cli):
        code, out = cli("generate", "A todo app")
        assert code == 0
        assert "Project generated" in out
        assert "Files generated: 2" in out

        code, out = cli("projects")
        assert "Todo App" in out

        code, out = cli("files", "Todo App")
        assert "components/Button.tsx" in out
        assert "package.json" in out

        code, out = cli("show", "Todo App", "README.md")
        assert code == 0
        assert "# Todo App" in out

        code, out = cli("validate", "Todo App")
        assert code == 0
        assert "ready for preview" in out

    def test_delete_with_yes(self, cli):
        cli("generate", "A todo app")

        code, out = cli("delete", "Todo App", "-y")

        assert code == 0
        assert "Deleted Todo App" in out
        assert "No projects yet" in cli("projects")[1]

    def test_errors_exit_nonzero(self, cli):
        code, out = cli("files", "missing")

        assert code == 1
        assert "PROJECT_NOT_FOUND" in out
