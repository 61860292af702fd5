import pytest

import telemetry
from config import Config


def test_span_accepts_attributes():
    with telemetry.span("workshop.test", mod_id=1111, skipped=None) as current:
        current.set_attribute("workshop.extra", True)


@pytest.mark.asyncio
async def test_traced_passes_through():
    @telemetry.traced("workshop.echo")
    async def echo(mod_id, *, suffix=""):
        return f"{mod_id}{suffix}"

    assert await echo(1111, suffix="!") == "1111!"
    assert echo.__name__ == "echo"


def test_tracing_disabled_without_dsn(monkeypatch):
    monkeypatch.setattr(telemetry, "_STATE", telemetry._TracingState())

    assert telemetry.configure_tracing(Config(uptrace_dsn=None)) is False
    telemetry.shutdown_tracing()
