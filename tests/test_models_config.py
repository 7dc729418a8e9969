"""Tests for configuration models."""

import json

import pytest
from pydantic import ValidationError

from visual_parity.models.config import DeviceProfile, EnvironmentConfig, ParityConfig


class TestEnvironmentConfig:

    def test_accepts_base_url_alias(self):
        env = EnvironmentConfig(**{"baseUrl": "https://staging.example.com", "urls": ["/"]})
        assert env.base_url == "https://staging.example.com"

    def test_strips_trailing_slash(self):
        env = EnvironmentConfig(base_url="https://staging.example.com/")
        assert env.base_url == "https://staging.example.com"

    def test_rejects_empty_base_url(self):
        with pytest.raises(ValidationError):
            EnvironmentConfig(base_url="  ")


class TestParityConfig:

    def test_defaults(self):
        cfg = ParityConfig(
            staging=EnvironmentConfig(base_url="https://s.example.com"),
            prod=EnvironmentConfig(base_url="https://p.example.com"),
        )
        assert (cfg.canvas_width, cfg.canvas_height) == (1280, 800)
        assert cfg.devices == [DeviceProfile(name="Desktop", width=1280, height=800)]
        assert cfg.max_parallel_contexts == 1
        assert cfg.wait_until == "networkidle"
        assert cfg.report_formats == ["html", "json"]
        assert "bat.bing.com" in cfg.image_check_exclude_patterns

    def test_rejects_unknown_wait_until(self):
        with pytest.raises(ValidationError):
            ParityConfig(
                staging=EnvironmentConfig(base_url="https://s.example.com"),
                prod=EnvironmentConfig(base_url="https://p.example.com"),
                wait_until="whenever",
            )

    def test_rejects_zero_workers(self):
        with pytest.raises(ValidationError):
            ParityConfig(
                staging=EnvironmentConfig(base_url="https://s.example.com"),
                prod=EnvironmentConfig(base_url="https://p.example.com"),
                max_parallel_contexts=0,
            )

    def test_save_and_load_round_trip(self, parity_config, tmp_path):
        path = tmp_path / "nested" / "config.json"
        parity_config.save(path)
        loaded = ParityConfig.load(path)
        assert loaded == parity_config

    def test_load_camel_case_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "staging": {"baseUrl": "https://staging.example.com", "urls": ["/", "/about/"]},
            "prod": {"baseUrl": "https://www.example.com", "urls": ["https://www.example.com/"]},
        }))
        cfg = ParityConfig.load(path)
        assert cfg.staging.urls == ["/", "/about/"]
        assert cfg.prod.base_url == "https://www.example.com"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ParityConfig.load(tmp_path / "nope.json")

    def test_get_device_case_insensitive(self, parity_config):
        assert parity_config.get_device("desktop").name == "Desktop"

    def test_get_device_unknown(self, parity_config):
        with pytest.raises(KeyError, match="Unknown device"):
            parity_config.get_device("Watch")
