"""
tests/test_config.py
Settings validation, duration parsing and the YAML defaults file.
Run: pytest tests/test_config.py -v
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from netscout.utils.config import (
    ConfigError, ScanConfig, load_config_file, split_targets,
)
from netscout.utils.validators import (
    parse_duration, validate_format, validate_rate, validate_timeout,
    validate_workers,
)


# ─── Durations ────────────────────────────────────────────────────────────────

class TestParseDuration:

    @pytest.mark.parametrize("text,seconds", [
        ("2s",     2.0),
        ("500ms",  0.5),
        ("1m30s",  90.0),
        ("1h",     3600.0),
        ("250us",  0.00025),
        ("1.5",    1.5),
        ("0.25s",  0.25),
        (" 3s ",   3.0),
    ])
    def test_valid(self, text, seconds):
        assert parse_duration(text) == pytest.approx(seconds)

    @pytest.mark.parametrize("text", ["", "abc", "5x", "s", "10 s", "nan", "inf", "2s junk"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)

    def test_non_string(self):
        with pytest.raises(ValueError):
            parse_duration(5)


# ─── Bounds ───────────────────────────────────────────────────────────────────

class TestValidators:

    def test_workers(self):
        assert validate_workers(1) == (True, "")
        assert validate_workers(10_000) == (True, "")
        assert validate_workers(0) == (False, "workers must be at least 1")
        ok, msg = validate_workers(10_001)
        assert not ok and "cannot exceed 10000" in msg

    def test_timeout(self):
        assert validate_timeout(0.001)[0]
        assert validate_timeout(300)[0]
        assert validate_timeout(0.0005) == (False, "timeout must be at least 1ms")
        assert validate_timeout(301) == (False, "timeout cannot exceed 5 minutes")
        assert validate_timeout(float("nan"))[0] is False

    def test_rate(self):
        assert validate_rate(0)[0]
        assert validate_rate(-1) == (False, "rate limit cannot be negative")

    def test_format(self):
        for fmt in ("text", "json", "csv"):
            assert validate_format(fmt)[0]
        ok, msg = validate_format("xml")
        assert not ok and "invalid output format: xml" in msg


# ─── ScanConfig ───────────────────────────────────────────────────────────────

class TestScanConfig:

    def test_defaults(self):
        cfg = ScanConfig(targets=["10.0.0.1"])
        assert cfg.ports == "80,443"
        assert cfg.workers == 100
        assert cfg.timeout_s == 2.0
        assert cfg.rate_limit == 0
        assert cfg.output_format == "text"
        assert cfg.show_progress is False
        cfg.validate()

    @pytest.mark.parametrize("changes,fragment", [
        ({"targets": []},              "target"),
        ({"workers": 0},               "workers must be at least 1"),
        ({"timeout_s": 0},             "timeout must be at least 1ms"),
        ({"rate_limit": -5},           "rate limit cannot be negative"),
        ({"output_format": "yaml"},    "invalid output format"),
        ({"progress_interval_s": 0},   "progress interval"),
    ])
    def test_validate_rejects(self, changes, fragment):
        cfg = ScanConfig(targets=["10.0.0.1"]).merged(changes)
        with pytest.raises(ConfigError, match=fragment):
            cfg.validate()

    def test_merged_skips_none(self):
        base = ScanConfig(targets=["10.0.0.1"], workers=50)
        out = base.merged({"workers": None, "ports": "22"})
        assert out.workers == 50
        assert out.ports == "22"
        assert base.ports == "80,443"

    def test_merged_unknown_key(self):
        with pytest.raises(ConfigError):
            ScanConfig().merged({"threads": 4})

    def test_from_mapping(self):
        cfg = ScanConfig.from_mapping({
            "targets": "10.0.0.1, 10.0.0.0/30",
            "ports": "22,80",
            "workers": 20,
            "timeout": "500ms",
            "rate": 100,
            "format": "json",
            "progress": True,
            "progress_interval": 1,
        })
        assert cfg.targets == ["10.0.0.1", "10.0.0.0/30"]
        assert cfg.timeout_s == 0.5
        assert cfg.rate_limit == 100
        assert cfg.output_format == "json"
        assert cfg.progress_interval_s == 1.0
        assert cfg.show_progress

    def test_from_mapping_target_list(self):
        cfg = ScanConfig.from_mapping({"targets": ["10.0.0.1", " 10.0.0.2 "]})
        assert cfg.targets == ["10.0.0.1", "10.0.0.2"]

    @pytest.mark.parametrize("data", [
        {"threads": 4},
        {"timeout": "soon"},
        {"workers": "many"},
        {"verbose": "yes"},
        {"workers": True},
    ])
    def test_from_mapping_rejects(self, data):
        with pytest.raises(ConfigError):
            ScanConfig.from_mapping(data)

    def test_split_targets(self):
        assert split_targets("10.0.0.1, ,10.0.0.2,") == ["10.0.0.1", "10.0.0.2"]


# ─── YAML file ────────────────────────────────────────────────────────────────

class TestConfigFile:

    def test_missing_file_is_empty(self, tmp_path):
        assert load_config_file(tmp_path / "absent.yaml") == {}

    def test_reads_scan_section(self, tmp_path):
        path = tmp_path / "netscout.yaml"
        path.write_text("scan:\n  ports: \"1-1024\"\n  workers: 250\n  timeout: 1s\n")
        data = load_config_file(path)
        assert data == {"ports": "1-1024", "workers": 250, "timeout": "1s"}
        cfg = ScanConfig.from_mapping(data)
        assert cfg.workers == 250
        assert cfg.timeout_s == 1.0

    def test_empty_file(self, tmp_path):
        path = tmp_path / "netscout.yaml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "netscout.yaml"
        path.write_text("scan: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config_file(path)

    @pytest.mark.parametrize("body", ["- just\n- a list\n", "scan: 5\n"])
    def test_wrong_shape(self, tmp_path, body):
        path = tmp_path / "netscout.yaml"
        path.write_text(body)
        with pytest.raises(ConfigError):
            load_config_file(path)


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
