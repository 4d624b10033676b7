"""Tests for process startup wiring."""

import pytest
from flask import Flask

from poe_power import main as main_module
from poe_power.api import SystemIdRequestHandler
from poe_power.config import ControllerSettings, Settings, parse_fleet
from poe_power.errors import AuthError, FailedToConstructUrl
from poe_power.memory_client import InMemoryControllerClient

FLEET = [{"mac": "00:00:00:00:00:00", "machines": [{"system_id": "system-id", "port_id": 1}]}]


def _settings(**controller) -> Settings:
    ctrl = {"url": "https://unifi.test", "username": "maas", "password": "secret"}
    ctrl.update(controller)
    return Settings(controller=ControllerSettings(**ctrl), fleet=parse_fleet(FLEET))


def test_build_service_with_fake_controller():
    service = main_module.build_service(_settings(fake=True))
    assert service.get_power_status("system-id").to_response() == ({"status": "running"}, 200)


def test_build_service_rejects_bad_url():
    with pytest.raises(FailedToConstructUrl):
        main_module.build_service(_settings(url="unifi.test"))


def test_build_service_login_failure(monkeypatch):
    monkeypatch.setattr(
        main_module, "_fake_controller", lambda settings: InMemoryControllerClient(fail_login=True)
    )
    with pytest.raises(AuthError):
        main_module.build_service(_settings(fake=True))


def test_main_config_error_exit_code(tmp_path, monkeypatch):
    monkeypatch.setattr(main_module, "configure_logging", lambda *args, **kwargs: None)
    assert main_module.main(["--config", str(tmp_path / "missing.yml")]) == 1


def test_main_serves_app(tmp_path, monkeypatch):
    config = tmp_path / "config.yml"
    config.write_text(
        "controller:\n  url: https://unifi.test\n  fake: true\n"
        "server:\n  port: 8080\n"
        "devices:\n  - mac: '00:00:00:00:00:00'\n    machines:\n      - system_id: a\n        port_id: 1\n",
        encoding="utf-8",
    )
    runs = []
    monkeypatch.setattr(main_module, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(Flask, "run", lambda self, **kwargs: runs.append(kwargs))

    assert main_module.main(["-c", str(config)]) == 0
    assert runs == [
        {"host": "0.0.0.0", "port": 8080, "threaded": True, "request_handler": SystemIdRequestHandler}
    ]


def test_config_path_falls_back_to_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_CONFIG_FILE", str(tmp_path / "from-env.yml"))
    assert main_module.parse_args([]).config_file is None
    monkeypatch.setattr(main_module, "configure_logging", lambda *args, **kwargs: None)
    assert main_module.main([]) == 1
