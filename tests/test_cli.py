"""Tests for the shop-backend command line entry point."""

import pytest
from click.testing import CliRunner

from shop_backend import cli


class FakeSocket:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeSupervisor:
    instances = []

    def __init__(self, target, args=(), worker_count=None):
        self.target = target
        self.args = args
        self.worker_count = worker_count
        self.started = False
        self.terminated = False
        FakeSupervisor.instances.append(self)

    def run_forever(self):
        self.started = True
        raise KeyboardInterrupt

    def terminate(self):
        self.terminated = True


@pytest.fixture
def fake_runtime(monkeypatch):
    FakeSupervisor.instances = []
    sockets = [FakeSocket()]
    bound = []

    def fake_bind(settings):
        bound.append(settings)
        return sockets

    monkeypatch.setattr(cli, "Supervisor", FakeSupervisor)
    monkeypatch.setattr(cli, "bind_sockets", fake_bind)
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    monkeypatch.setattr(cli.signal, "signal", lambda signum, handler: None)
    return {"sockets": sockets, "bound": bound}


class TestMain:
    def test_options_reach_the_supervisor(self, fake_runtime):
        result = CliRunner().invoke(cli.main, ["--port", "7000", "--workers", "3", "--log-level", "debug"])
        assert result.exit_code == 0, result.output

        (supervisor,) = FakeSupervisor.instances
        assert supervisor.target is cli.run_worker
        assert supervisor.worker_count == 3

        settings_container, sockets = supervisor.args
        assert settings_container["server"]["port"] == 7000
        assert settings_container["logging"]["level"] == "DEBUG"
        assert sockets is fake_runtime["sockets"]
        assert fake_runtime["bound"][0].server.port == 7000

    def test_worker_count_defaults_to_cpu_detection(self, fake_runtime):
        result = CliRunner().invoke(cli.main, [], env={"WORKERS": None})
        assert result.exit_code == 0, result.output
        assert FakeSupervisor.instances[0].worker_count is None

    def test_interrupt_stops_workers_and_closes_sockets(self, fake_runtime):
        CliRunner().invoke(cli.main, [])
        assert FakeSupervisor.instances[0].terminated
        assert all(sock.closed for sock in fake_runtime["sockets"])

    def test_invalid_port_in_environment_is_reported(self, fake_runtime):
        result = CliRunner().invoke(cli.main, [], env={"PORT": "abc"})
        assert result.exit_code == 1
        assert "PORT must be an integer" in result.output
        assert FakeSupervisor.instances == []

    def test_zero_workers_is_rejected(self, fake_runtime):
        result = CliRunner().invoke(cli.main, ["--workers", "0"])
        assert result.exit_code == 2
