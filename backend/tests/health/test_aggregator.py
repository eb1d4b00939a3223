"""Tests for the summary aggregator."""

from src.health.aggregator import summarize
from src.health.models import HealthCheckResult, HealthStatus, HealthSummary


def result(component_id: str, status: HealthStatus, response_time_ms: int | None = None):
    return HealthCheckResult(
        component_id=component_id,
        component_name=component_id,
        landscape="EU10",
        status=status,
        response_time_ms=response_time_ms,
    )


class TestSummarize:
    def test_empty_results(self):
        assert summarize([]) == HealthSummary()

    def test_four_up_one_timeout(self):
        results = [
            result("a", HealthStatus.UP, 100),
            result("b", HealthStatus.UP, 150),
            result("c", HealthStatus.UP, 200),
            result("d", HealthStatus.UP, 50),
            result("e", HealthStatus.ERROR),
        ]

        assert summarize(results) == HealthSummary(
            total=5, up=4, down=0, unknown=0, error=1, avg_response_time_ms=125
        )

    def test_unknown_bucket_includes_out_of_service(self):
        results = [
            result("a", HealthStatus.UNKNOWN),
            result("b", HealthStatus.OUT_OF_SERVICE),
            result("c", HealthStatus.DOWN, 10),
        ]

        summary = summarize(results)

        assert summary.unknown == 2
        assert summary.down == 1
        assert summary.error == 0

    def test_down_and_error_are_separate(self):
        summary = summarize([result("a", HealthStatus.DOWN, 1), result("b", HealthStatus.ERROR, 1)])
        assert (summary.down, summary.error) == (1, 1)

    def test_loading_counts_only_in_total(self):
        summary = summarize([result("a", HealthStatus.LOADING)])
        assert summary.total == 1
        assert summary.up + summary.down + summary.unknown + summary.error == 0

    def test_average_rounds_half_up(self):
        summary = summarize([result("a", HealthStatus.UP, 1), result("b", HealthStatus.UP, 2)])
        assert summary.avg_response_time_ms == 2

    def test_buckets_never_exceed_total(self):
        results = [result(str(i), status, i) for i, status in enumerate(HealthStatus)]

        summary = summarize(results)

        assert summary.total == len(results)
        assert summary.up + summary.down + summary.unknown <= summary.total
