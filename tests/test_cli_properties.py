"""
Tests for the command-line interface.

Runs use simulation mode, so no network traffic is generated.
"""

import json
from pathlib import Path

import pytest

from site_stress import __version__
from site_stress.cli import build_run_config, create_default_config, create_parser, main


ENV_VARS = (
    "SITESTRESS_DOMAINS",
    "SITESTRESS_MINUTES",
    "SITESTRESS_OUTPUT_DIR",
    "SITESTRESS_LANGUAGE",
    "SITESTRESS_CONFIG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and any .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestParser:
    """Argument parsing."""

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys) -> None:
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_bad_minutes_is_usage_error(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "-d", "example.com", "-t", "soon"])
        assert exc_info.value.code == 2


class TestBuildRunConfig:
    """Flags, environment and config file are merged into one RunConfig."""

    def parse(self, *argv: str):
        return create_parser().parse_args(["run", *argv])

    def test_flags(self) -> None:
        config = build_run_config(
            self.parse("-d", "https://Example.com/, test.nl", "-t", "2", "--timeout", "1.5"),
            create_default_config(),
        )

        assert config.domains == ("example.com", "test.nl")
        assert config.duration_seconds == 120.0
        assert config.workers_per_domain == 500
        assert config.transport.request_timeout == 1.5

    def test_single_domain_gets_more_workers(self) -> None:
        config = build_run_config(self.parse("-d", "example.com", "-t", "1"), create_default_config())
        assert config.workers_per_domain == 1000

    def test_environment_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("SITESTRESS_DOMAINS", "a.example;b.example")
        monkeypatch.setenv("SITESTRESS_MINUTES", "0.5")
        monkeypatch.setenv("SITESTRESS_LANGUAGE", "nl")

        config = build_run_config(self.parse(), create_default_config())

        assert config.domains == ("a.example", "b.example")
        assert config.duration_seconds == 30.0
        assert config.language == "nl"

    def test_flags_override_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("SITESTRESS_DOMAINS", "a.example")
        config = build_run_config(self.parse("-d", "b.example", "-w", "7"), create_default_config())

        assert config.domains == ("b.example",)
        assert config.workers_per_domain == 7

    def test_switches(self) -> None:
        config = build_run_config(
            self.parse("-d", "example.com", "--no-progress", "--dry-run", "--client-errors-as-failures", "-v"),
            create_default_config(),
        )

        assert not config.monitor.enabled
        assert config.simulation_mode
        assert config.classification.client_errors_are_failures
        assert config.logging.enabled


class TestRunCommand:
    """End-to-end runs through main()."""

    def test_simulated_run_writes_report(self, tmp_path: Path, capsys) -> None:
        reports = tmp_path / "reports"

        code = main([
            "run", "-d", "example.com", "-t", "0.005", "-w", "3",
            "--dry-run", "--no-progress", "-o", str(reports),
        ])

        assert code == 0
        out = capsys.readouterr().out
        assert "WARNING" in out
        assert "FINAL RESULTS" in out
        files = list(reports.glob("report_*.txt"))
        assert len(files) == 1
        assert "DOMAIN: example.com" in files[0].read_text(encoding="utf-8")

    def test_invalid_domain_exits_2(self, capsys) -> None:
        assert main(["run", "-d", "bad domain!", "-t", "1"]) == 2
        assert "Invalid domain" in capsys.readouterr().err

    def test_missing_domains_exits_2(self) -> None:
        assert main(["run", "-t", "1"]) == 2

    @pytest.mark.parametrize("extra", [
        ["-t", "nan"],
        ["-t", "inf"],
        ["--timeout", "inf"],
        ["--interval", "nan"],
    ])
    def test_non_finite_numbers_exit_2(self, extra, capsys) -> None:
        code = main(["run", "-d", "example.com", "--dry-run", "--no-progress", *extra])

        assert code == 2
        assert "finite" in capsys.readouterr().err

    def test_non_finite_config_file_exits_2(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            '{"domains": ["example.com"], "duration_seconds": Infinity, "simulation_mode": true}',
            encoding="utf-8",
        )

        assert main(["run", "-c", str(path)]) == 2
        assert main(["config", "validate", "--path", str(path)]) == 1

    def test_unusable_output_dir_exits_1(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        code = main(["run", "-d", "example.com", "-t", "0.001", "--dry-run", "-o", str(blocker / "out")])

        assert code == 1

    def test_probe_rejects_invalid_domain(self) -> None:
        assert main(["probe", "-d", "bad domain!"]) == 2

    def test_probe_requires_domains(self) -> None:
        assert main(["probe"]) == 2


class TestConfigCommand:
    """config init / show / validate."""

    def test_init_show_validate(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "config.json"

        assert main(["config", "init", "--path", str(path), "-l", "nl"]) == 0
        assert json.loads(path.read_text(encoding="utf-8"))["language"] == "nl"
        assert main(["config", "init", "--path", str(path)]) == 1
        assert main(["config", "init", "--path", str(path), "--force"]) == 0

        assert main(["config", "show", "--path", str(path)]) == 0
        assert "Workers per domain: auto" in capsys.readouterr().out
        assert main(["config", "validate", "--path", str(path)]) == 0

    def test_validate_rejects_bad_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"domains": ["example.com"], "duration_seconds": -1}), encoding="utf-8")

        assert main(["config", "validate", "--path", str(path)]) == 1

    def test_run_uses_config_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "domains": ["example.com"],
            "duration_seconds": 0.05,
            "workers_per_domain": 2,
            "monitor": {"enabled": False},
            "simulation_mode": True,
        }), encoding="utf-8")

        assert main(["run", "-c", str(path)]) == 0

    def test_show_missing(self, tmp_path: Path) -> None:
        assert main(["config", "show", "--path", str(tmp_path / "none.json")]) == 1
