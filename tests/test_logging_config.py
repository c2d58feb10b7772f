import logging

import colorlog

from storefront_session.logging_config import (
    ErrorAggregator,
    LoggerConfigurator,
    log_structured_error,
)


def test_aggregator_counts_by_type():
    agg = ErrorAggregator()
    agg.record_error("network", "down")
    agg.record_error("network", "down again", {"status": 502})
    agg.record_error("session", "expired")

    summary = agg.get_error_summary()

    assert summary["network"]["total_count"] == 2
    assert summary["network"]["label"] == "transport failures"
    assert summary["network"]["last_occurrence"]["context"] == {"status": 502}
    assert summary["session"]["total_count"] == 1


def test_aggregator_keeps_only_recent_entries():
    agg = ErrorAggregator()
    for i in range(ErrorAggregator.max_entries + 5):
        agg.record_error("network", str(i))
    summary = agg.get_error_summary()["network"]
    assert summary["total_count"] == ErrorAggregator.max_entries
    assert summary["last_occurrence"]["message"] == str(ErrorAggregator.max_entries + 4)


def test_session_ended_by_renewal():
    agg = ErrorAggregator()
    assert agg.session_ended_by_renewal() is False
    agg.record_error("session", "replayed request rejected")
    assert agg.session_ended_by_renewal() is False
    agg.record_error("renewal", "HTTP 500 during token renewal")
    agg.record_error("session", "Session ended, redirecting to login")
    assert agg.session_ended_by_renewal() is True


def test_summary_report_orders_known_categories_first(caplog):
    agg = ErrorAggregator()
    caplog.set_level(logging.INFO)
    agg.log_summary_report()
    assert "No errors recorded" in caplog.text

    agg.record_error("custom", "odd")
    agg.record_error("renewal", "timeout")
    agg.record_error("session", "ended")
    agg.log_summary_report()

    lines = [r.getMessage() for r in caplog.records if r.getMessage().startswith("  ")]
    assert lines[0] == "  renewal (token renewal failures): 1 last=timeout"
    assert lines[1].startswith("  session (sessions ended): 1")
    assert lines[2].startswith("  custom (uncategorized): 1")
    assert "Last logout followed a failed token renewal" in caplog.text


def test_log_structured_error_formats_context(caplog):
    caplog.set_level(logging.INFO)
    log_structured_error(
        "network",
        "GET /x failed",
        exception=TimeoutError("slow"),
        context={"status": None},
        level=logging.WARNING,
    )
    assert "[NETWORK] GET /x failed | Exception: TimeoutError: slow | Context: status=None" in caplog.text


def test_configure_installs_colored_formatter(monkeypatch):
    monkeypatch.setenv("DEBUG", "1")
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        LoggerConfigurator().configure()
        assert root.level == logging.DEBUG
        assert any(isinstance(h.formatter, colorlog.ColoredFormatter) for h in root.handlers)
        assert logging.getLogger("aiohttp").level == logging.WARNING
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
