"""Tests for the shared logging setup and order-scoped log context."""

import logging

import pytest
import structlog
from shared import logging as shared_logging
from shared.config import Settings
from shared.logging import configure_logging, log_level, order_context


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture()
def captured(monkeypatch):
    calls = []
    monkeypatch.setattr(shared_logging, "configure_protean_logging", lambda **kwargs: calls.append(kwargs))
    return calls


class TestLevel:
    @pytest.mark.parametrize(
        "env,level",
        [("production", "INFO"), ("staging", "INFO"), ("development", "DEBUG"), ("test", "WARNING")],
    )
    def test_level_follows_environment(self, env, level):
        assert log_level(Settings(env=env)) == level

    def test_unknown_environment_logs_info(self):
        assert log_level(Settings(env="preview")) == "INFO"

    def test_explicit_level_wins(self):
        assert log_level(Settings(env="production", log_level="debug")) == "DEBUG"

    def test_level_is_read_from_the_environment(self, monkeypatch):
        from shared.config import reset_settings

        monkeypatch.setenv("ENCOMIENDA_LOG_LEVEL", "error")
        reset_settings()
        assert log_level() == "ERROR"


class TestConfigure:
    def test_production_renders_json(self, captured):
        configure_logging(Settings(env="production", log_dir=""))

        [call] = captured
        assert call["format"] == "json"
        assert call["level"] == "INFO"
        assert call["log_dir"] is None

    def test_development_renders_console(self, captured):
        configure_logging(Settings(env="development", log_dir="/var/log/encomienda"))

        [call] = captured
        assert call["format"] == "console"
        assert call["level"] == "DEBUG"
        assert call["log_dir"] == "/var/log/encomienda"
        assert call["log_file_prefix"] == "encomienda"

    def test_log_files_are_created(self, tmp_path, restore_logging):
        log_dir = tmp_path / "logs"

        configure_logging(Settings(env="test", log_dir=str(log_dir)))

        assert (log_dir / "encomienda.log").exists()
        assert (log_dir / "encomienda_error.log").exists()


class TestOrderContext:
    def test_binds_order_id_inside_the_block(self):
        with order_context("ord-1", driver_id="driver-a"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["order_id"] == "ord-1"
            assert bound["driver_id"] == "driver-a"

        assert "order_id" not in structlog.contextvars.get_contextvars()

    def test_events_inside_carry_the_order(self):
        capture = structlog.testing.LogCapture()
        log = structlog.wrap_logger(None, processors=[structlog.contextvars.merge_contextvars, capture])

        with order_context("ord-9"):
            log.info("Something happened")
        log.info("Outside")

        assert capture.entries[0]["order_id"] == "ord-9"
        assert "order_id" not in capture.entries[1]

    async def test_transition_runs_with_the_order_bound(self, store, make_order):
        from ordering.order.order import Actor, ActorRole, OrderStatus
        from ordering.order.state_machine import OrderStateMachine

        order = await make_order()
        bound = []
        store.on_write(lambda before, after: bound.append(structlog.contextvars.get_contextvars()))

        await OrderStateMachine(store=store).request_transition(
            order.id, OrderStatus.PREPARING, Actor(actor_id="store-1", role=ActorRole.STORE)
        )

        [context] = bound
        assert context["order_id"] == order.id
        assert (context["actor_id"], context["actor_role"]) == ("store-1", "store")
        assert "order_id" not in structlog.contextvars.get_contextvars()
