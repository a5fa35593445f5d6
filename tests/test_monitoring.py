import pytest
from core.monitoring import HealthMonitor


@pytest.fixture
def monitor():
    return HealthMonitor(alert_threshold=3)


class TestHealthMonitor:
    def test_initial_status_empty(self, monitor):
        assert monitor.get_status() == {}

    def test_record_success_resets_counter(self, monitor):
        monitor.record_failure("news-list", "offline")
        monitor.record_failure("news-list", "offline")
        monitor.record_success("news-list")
        assert monitor.get_failures("news-list") == 0
        assert monitor.get_last_error("news-list") == ""

    def test_record_failure_keeps_last_message(self, monitor):
        monitor.record_failure("summarize", "scraper blocked")
        monitor.record_failure("summarize", "Server error: 502 - Bad Gateway")
        assert monitor.get_failures("summarize") == 2
        assert monitor.get_last_error("summarize") == "Server error: 502 - Bad Gateway"

    def test_empty_message_keeps_previous(self, monitor):
        monitor.record_failure("summarize", "first")
        monitor.record_failure("summarize")
        assert monitor.get_last_error("summarize") == "first"

    def test_alert_triggered_at_threshold(self, monitor):
        assert not monitor.record_failure("market-indices")  # 1
        assert not monitor.record_failure("market-indices")  # 2
        assert monitor.record_failure("market-indices")       # 3 = threshold

    def test_alert_only_once(self, monitor):
        for _ in range(2):
            monitor.record_failure("news-list")
        assert monitor.record_failure("news-list")
        assert not monitor.record_failure("news-list")

    def test_alert_resets_after_success(self, monitor):
        for _ in range(3):
            monitor.record_failure("news-list")
        monitor.record_success("news-list")
        monitor.record_failure("news-list")
        monitor.record_failure("news-list")
        assert monitor.record_failure("news-list")

    def test_independent_surfaces(self, monitor):
        monitor.record_failure("news-list")
        monitor.record_failure("summarize")
        assert monitor.get_failures("news-list") == 1
        assert monitor.get_failures("summarize") == 1
        assert monitor.get_status() == {"news-list": 1, "summarize": 1}

    def test_seconds_since_success(self, monitor):
        assert monitor.seconds_since_success("news-list") is None
        monitor.record_success("news-list")
        assert monitor.seconds_since_success("news-list") >= 0
