"""
tests/test_cli.py
Command line: flag handling, config file merging and exit codes.
Run: pytest tests/test_cli.py -v
"""

import sys
import os
import io
import json
import logging
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import AsyncMock, patch

from netscout import main as cli
from netscout.core.errors import ScanCancelled
from netscout.utils.config import ConfigError, ScanConfig
from netscout.utils.constants import EXIT_CANCELLED, EXIT_FAILURE, EXIT_OK


def _exit_code(argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    return exc_info.value.code


@pytest.fixture
def no_config(tmp_path):
    """Point --config at a file that does not exist."""
    return ["--config", str(tmp_path / "none.yaml")]


class TestExitCodes:

    def test_successful_scan(self, tmp_path, no_config, open_port, closed_port):
        out = tmp_path / "scan.json"
        code = _exit_code([
            "-t", "127.0.0.1", "-p", f"{open_port},{closed_port}",
            "--timeout", "1s", "-f", "json", "-o", str(out), *no_config,
        ])
        assert code == EXIT_OK

        doc = json.loads(out.read_text())
        assert doc["summary"]["total_completed"] == 2
        assert doc["summary"]["open"] == 1
        open_rows = [r for r in doc["results"] if r["status"] == "open"]
        assert [r["port"] for r in open_rows] == [open_port]

    def test_text_to_stdout(self, capsys, no_config, open_port):
        code = _exit_code(["-t", "127.0.0.1", "-p", str(open_port), *no_config])
        assert code == EXIT_OK
        assert capsys.readouterr().out == f"127.0.0.1:{open_port} - open\n"

    def test_missing_target(self, caplog, no_config):
        with caplog.at_level(logging.ERROR):
            assert _exit_code(["-p", "80", *no_config]) == EXIT_FAILURE
        assert "target (-t) is required" in caplog.text

    def test_invalid_ports(self, caplog, no_config):
        with caplog.at_level(logging.ERROR):
            assert _exit_code(["-t", "127.0.0.1", "-p", "100-50", *no_config]) == EXIT_FAILURE
        assert "Failed to create scanner" in caplog.text

    def test_invalid_target(self, no_config):
        assert _exit_code(["-t", "10.0.0.999", *no_config]) == EXIT_FAILURE

    @pytest.mark.parametrize("flags", [
        ["-w", "0"],
        ["-w", "10001"],
        ["--timeout", "0"],
        ["--timeout", "forever"],
        ["--rate", "-1"],
    ])
    def test_invalid_settings(self, no_config, flags):
        assert _exit_code(["-t", "127.0.0.1", *flags, *no_config]) == EXIT_FAILURE

    def test_bad_ports_keep_existing_output(self, tmp_path, no_config):
        previous = tmp_path / "prev.json"
        previous.write_text('{"results": []}\n')
        code = _exit_code(["-t", "127.0.0.1", "-p", "0", "-f", "json",
                           "-o", str(previous), *no_config])
        assert code == EXIT_FAILURE
        assert previous.read_text() == '{"results": []}\n'

    def test_bad_target_keeps_existing_output(self, tmp_path, no_config):
        previous = tmp_path / "prev.txt"
        previous.write_text("10.0.0.1:22 - open\n")
        code = _exit_code(["-t", "10.0.0.999", "-o", str(previous), *no_config])
        assert code == EXIT_FAILURE
        assert previous.read_text() == "10.0.0.1:22 - open\n"

    def test_live_output_failure(self, no_config, open_port):
        class BrokenStream(io.StringIO):
            def write(self, text):
                raise OSError(32, "Broken pipe")

        cfg = ScanConfig(targets=["127.0.0.1"], ports=str(open_port),
                         timeout_s=1.0, verbose=True)
        assert cli.run(cfg, stream=BrokenStream()) == EXIT_FAILURE

    def test_unwritable_output(self, tmp_path, no_config):
        bad = tmp_path / "missing-dir" / "out.txt"
        assert _exit_code(["-t", "127.0.0.1", "-o", str(bad), *no_config]) == EXIT_FAILURE

    def test_cancelled_scan(self, caplog, no_config):
        with patch("netscout.core.scanner_engine.ScanSession.scan",
                   new=AsyncMock(side_effect=ScanCancelled("received SIGINT"))):
            with caplog.at_level(logging.ERROR):
                code = _exit_code(["-t", "127.0.0.1", "-p", "80", *no_config])
        assert code == EXIT_CANCELLED
        assert "Scan cancelled by user" in caplog.text

    def test_unexpected_failure(self, no_config):
        with patch("netscout.core.scanner_engine.ScanSession.scan",
                   new=AsyncMock(side_effect=RuntimeError("boom"))):
            assert _exit_code(["-t", "127.0.0.1", "-p", "80", *no_config]) == EXIT_FAILURE


class TestConfigFile:

    def test_file_supplies_defaults(self, tmp_path, open_port):
        conf = tmp_path / "netscout.yaml"
        out = tmp_path / "out.csv"
        conf.write_text(
            "scan:\n"
            "  targets: 127.0.0.1\n"
            f"  ports: \"{open_port}\"\n"
            "  format: csv\n"
            f"  output: {out}\n"
        )
        assert _exit_code(["--config", str(conf)]) == EXIT_OK
        lines = out.read_text().splitlines()
        assert lines[0] == "IP,Port,Status,Timestamp,Duration,Error"
        assert lines[1].startswith(f"127.0.0.1,{open_port},open,")

    def test_flags_override_file(self, tmp_path):
        conf = tmp_path / "netscout.yaml"
        conf.write_text("scan:\n  workers: 7\n  ports: \"22\"\n")
        args = cli.build_cli().parse_args(["--config", str(conf), "-t", "10.0.0.1", "-w", "9"])
        cfg = cli._resolve_config(args)
        assert cfg.workers == 9
        assert cfg.ports == "22"
        assert cfg.targets == ["10.0.0.1"]

    def test_bad_file_value(self, tmp_path):
        conf = tmp_path / "netscout.yaml"
        conf.write_text("scan:\n  timeout: soon\n")
        args = cli.build_cli().parse_args(["--config", str(conf), "-t", "10.0.0.1"])
        with pytest.raises(ConfigError):
            cli._resolve_config(args)
        assert _exit_code(["--config", str(conf), "-t", "10.0.0.1"]) == EXIT_FAILURE


class TestParser:

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.build_cli().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert "NETscout v" in capsys.readouterr().out

    def test_flags_default_to_none(self):
        args = cli.build_cli().parse_args(["-t", "10.0.0.1"])
        assert args.ports is None
        assert args.workers is None
        assert args.timeout is None
        assert args.verbose is False


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
