"""
Unit tests for process handoff.
"""
from app.entrypoint.handoff import handoff, server_command


def test_explicit_command_replaces_process(make_config, fake_exec):
    argv = handoff(make_config(), ["celery", "-A", "app", "worker"], fake_exec)
    assert fake_exec.calls == [("celery", ["celery", "-A", "app", "worker"])]
    assert argv[0] == "celery"


def test_development_server(make_config, fake_exec):
    handoff(make_config(APP_ENV="local"), None, fake_exec)
    file, argv = fake_exec.calls[0]
    assert file == "uvicorn"
    assert argv[:6] == ["uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", "8000"]
    assert "--reload" in argv
    assert "--workers" not in argv


def test_production_server(make_config):
    argv = server_command(make_config(APP_ENV="production", WEB_CONCURRENCY="4", APP_PORT="9000"))
    assert "--reload" not in argv
    assert argv[argv.index("--workers") + 1] == "4"
    assert argv[argv.index("--port") + 1] == "9000"
    assert argv[argv.index("--host") + 1] == "0.0.0.0"
