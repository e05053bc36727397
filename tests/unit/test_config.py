from exam_monitor.config import MonitorConfig, Settings, get_settings


def test_defaults_from_config_yaml():
    settings = get_settings()
    assert settings.port == 8080
    assert settings.monitor.sweep_interval_ms == 5000
    assert settings.monitor.visit_expiry_ms == 2000


def test_port_env_override(monkeypatch):
    monkeypatch.setenv("PORT", "9090")
    assert get_settings().port == 9090


def test_nested_env_override(monkeypatch):
    monkeypatch.setenv("MONITOR__SWEEP_INTERVAL_MS", "250")
    settings = get_settings()
    assert settings.monitor.sweep_interval_ms == 250
    assert settings.monitor.visit_expiry_ms == 2000


def test_millisecond_values_convert_to_seconds():
    monitor = MonitorConfig(sweep_interval_ms=5000, visit_expiry_ms=2000, send_timeout_ms=250)
    assert monitor.sweep_interval == 5.0
    assert monitor.visit_expiry == 2.0
    assert monitor.send_timeout == 0.25


def test_init_values_win():
    settings = Settings(port=1234, monitor=MonitorConfig(sweep_interval_ms=100))
    assert settings.port == 1234
    assert settings.monitor.sweep_interval == 0.1
