"""Tests for monitor configuration loading."""

import pytest

from umonitor.app.config import DEFAULT_CONFIG_PATH, ConfigError, MonitorConfig, load_config

ENV_VARS = [
    "UM_STATUS_URL", "UM_REFRESH_INTERVAL_S", "UM_FETCH_TIMEOUT_S",
    "UM_ONLINE_KEYWORDS", "UM_OFFLINE_KEYWORDS", "UM_TITLE", "UM_USER_AGENT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestMonitorConfig:
    def test_defaults(self):
        cfg = MonitorConfig()
        assert cfg.status_url == "http://localhost:8025/api/status"
        assert cfg.refresh_interval_s == 10
        assert cfg.online_keywords == ("online",)
        assert cfg.offline_keywords == ("offline",)
        assert cfg.critical_threshold == 3

    @pytest.mark.parametrize("interval", [0, -5, 2.5, True])
    def test_interval_must_be_positive_int(self, interval):
        with pytest.raises(ConfigError):
            MonitorConfig(refresh_interval_s=interval)

    def test_empty_url_rejected(self):
        with pytest.raises(ConfigError):
            MonitorConfig(status_url="")

    def test_keywords_must_be_list(self):
        with pytest.raises(ConfigError):
            MonitorConfig(online_keywords="online")

    @pytest.mark.parametrize("keywords", [[""], ["online", "  "]])
    def test_empty_keyword_rejected(self, keywords):
        with pytest.raises(ConfigError):
            MonitorConfig(online_keywords=keywords)

    def test_keyword_lists_frozen(self):
        cfg = MonitorConfig(offline_keywords=["down"])
        assert cfg.offline_keywords == ("down",)

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)


class TestLoadConfig:
    def test_bundled_file(self):
        cfg = load_config(DEFAULT_CONFIG_PATH)
        assert cfg == MonitorConfig()

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(tmp_path / "absent.yaml") == MonitorConfig()

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "monitor.yaml"
        path.write_text(
            "status_url: http://mon.example:8025/api/status\n"
            "refresh_interval_s: 30\n"
            "timeouts:\n  fetch_s: 2.5\n"
            "keywords:\n  online: [up, online]\n  offline: [down]\n"
            "critical_threshold: 2\n",
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.status_url == "http://mon.example:8025/api/status"
        assert cfg.refresh_interval_s == 30
        assert cfg.fetch_timeout_s == 2.5
        assert cfg.online_keywords == ("up", "online")
        assert cfg.offline_keywords == ("down",)
        assert cfg.critical_threshold == 2

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "monitor.yaml"
        path.write_text("refresh_interval_s: 30\nkeywords:\n  offline: [down]\n", encoding="utf-8")
        monkeypatch.setenv("UM_REFRESH_INTERVAL_S", "5")
        monkeypatch.setenv("UM_OFFLINE_KEYWORDS", "offline, unreachable")
        monkeypatch.setenv("UM_STATUS_URL", "http://other/api/status")
        cfg = load_config(path)
        assert cfg.refresh_interval_s == 5
        assert cfg.offline_keywords == ("offline", "unreachable")
        assert cfg.status_url == "http://other/api/status"

    def test_bad_interval_in_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("UM_REFRESH_INTERVAL_S", "soon")
        with pytest.raises(ConfigError):
            load_config(tmp_path / "absent.yaml")

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "monitor.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_null_keyword_list(self, tmp_path):
        path = tmp_path / "monitor.yaml"
        path.write_text("keywords:\n  online:\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_empty_keyword_in_yaml(self, tmp_path):
        path = tmp_path / "monitor.yaml"
        path.write_text('keywords:\n  online: [""]\n', encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)
