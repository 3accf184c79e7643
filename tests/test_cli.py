"""Tests for netlab/__main__.py - command line entry point."""

from __future__ import annotations

import pytest

from netlab import __main__ as cli
from netlab.lib.errors import UnknownModuleError


class TestParser:
    """Tests for argument parsing."""

    def test_global_flags(self) -> None:
        """Logging flags come before the subcommand."""
        args = cli.build_parser().parse_args(["-v", "--json-log", "--log-file", "x.log", "start"])
        assert args.verbose is True
        assert args.json_log is True
        assert args.log_file == "x.log"
        assert args.command == "start"

    def test_module_requires_id(self) -> None:
        """'module' without an id is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args(["module"])
        assert exc_info.value.code == 2


class TestMain:
    """Tests for main()."""

    def test_no_command_prints_welcome(self, capsys) -> None:
        """Running without a command prints a hint and exits 0."""
        assert cli.main([]) == 0
        out = capsys.readouterr().out
        assert "netlab start" in out
        assert "netlab doctor" in out

    def test_unknown_module_exits_2(self, capsys, monkeypatch) -> None:
        """An unknown module id is reported on stderr with exit 2."""
        monkeypatch.setattr(cli, "run_tui", lambda *a, **k: pytest.fail("TUI must not start"))
        assert cli.main(["module", "99-nope"]) == 2
        err = capsys.readouterr().err
        assert "Unknown module: 99-nope" in err
        assert "01-osi-model" in err

    def test_known_module_starts_tui(self, monkeypatch, tmp_path) -> None:
        """A known module id is handed to the TUI."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
        calls = []
        monkeypatch.setattr(
            cli, "run_tui", lambda settings, module, root: calls.append((module, root)) or 0
        )
        assert cli.main(["module", "01-osi-model"]) == 0
        assert calls == [("01-osi-model", tmp_path)]

    def test_start_opens_menu(self, monkeypatch, tmp_path) -> None:
        """'start' runs the TUI without a start module."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
        calls = []
        monkeypatch.setattr(
            cli, "run_tui", lambda settings, module, root: calls.append(module) or 0
        )
        assert cli.main(["start"]) == 0
        assert calls == [None]

    def test_tui_logging_stays_off_console(self, monkeypatch, tmp_path) -> None:
        """The TUI configures logging without a console handler."""
        monkeypatch.chdir(tmp_path)
        seen = {}
        monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: seen.update(kwargs))
        monkeypatch.setattr(cli, "run_tui", lambda *args: 0)
        cli.main(["start"])
        assert seen["console"] is False

    @pytest.mark.parametrize("code", [0, 1])
    def test_doctor_exit_code(self, monkeypatch, code) -> None:
        """'doctor' returns the report's exit status."""
        monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
        monkeypatch.setattr(
            "netlab.lib.dependencies.run_doctor", lambda console, verifier=None: code
        )
        assert cli.main(["doctor"]) == code


class TestValidateModuleId:
    """Tests for module id validation."""

    def test_known(self) -> None:
        """Known ids pass through."""
        assert cli.validate_module_id("03-subnetting") == "03-subnetting"

    def test_unknown(self) -> None:
        """Unknown ids raise UnknownModuleError."""
        with pytest.raises(UnknownModuleError):
            cli.validate_module_id("nope")
