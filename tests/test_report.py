"""Tests for the usage report orchestrator."""

import pytest

from conftest import FakeBillRepository, FakeUsageRepository, bill, usage
from waterwise.analyzer.report import UsageAnalytics
from waterwise.core.errors import DataAccessError


@pytest.fixture
def analytics():
    events = [
        usage(100, "2024-01-01", "07:30"),
        usage(50, "2024-01-01", "20:00"),
        usage(200, "2024-01-08"),
        usage(30, "2024-02-03"),
    ]
    bills = [bill(40, "2024-01-31", 10000), bill(15, "2024-02-29", 3000, "B-2")]
    return UsageAnalytics(FakeUsageRepository(events), FakeBillRepository(bills))


class TestGenerateUsageReport:
    @pytest.mark.asyncio
    async def test_summary(self, analytics) -> None:
        report = await analytics.generate_usage_report()
        assert report.summary.total_days == 3
        assert report.summary.total_usage == pytest.approx(380)
        assert report.summary.average_daily == pytest.approx(380 / 3)
        assert report.summary.total_cost == pytest.approx(55)

    @pytest.mark.asyncio
    async def test_includes_every_analysis(self, analytics) -> None:
        report = await analytics.generate_usage_report()
        assert [p.day_of_week for p in report.patterns] == ["Monday", "Saturday"]
        assert [t.month for t in report.trends] == ["2024-01", "2024-02"]
        assert report.opportunities == await analytics.identify_savings_opportunities()

    @pytest.mark.asyncio
    async def test_empty_store_gives_zeroed_report(self) -> None:
        report = await UsageAnalytics(
            FakeUsageRepository(), FakeBillRepository()
        ).generate_usage_report()
        assert report.summary.total_days == 0
        assert report.summary.total_usage == 0
        assert report.summary.average_daily == 0
        assert report.summary.total_cost == 0
        assert report.patterns == []
        assert report.trends == []
        assert report.opportunities == []

    @pytest.mark.asyncio
    async def test_usage_read_failure_raises(self) -> None:
        analytics = UsageAnalytics(FakeUsageRepository(fail=True), FakeBillRepository())
        with pytest.raises(DataAccessError):
            await analytics.generate_usage_report()

    @pytest.mark.asyncio
    async def test_bill_read_failure_raises(self) -> None:
        analytics = UsageAnalytics(
            FakeUsageRepository([usage(10, "2024-01-01")]),
            FakeBillRepository(fail=True),
        )
        with pytest.raises(DataAccessError):
            await analytics.generate_usage_report()

    @pytest.mark.asyncio
    async def test_both_reads_complete_before_failing(self) -> None:
        usage_repo = FakeUsageRepository(fail=True)
        bill_repo = FakeBillRepository()
        with pytest.raises(DataAccessError):
            await UsageAnalytics(usage_repo, bill_repo).generate_usage_report()
        assert usage_repo.reads == 1
        assert bill_repo.reads == 1

    @pytest.mark.asyncio
    async def test_reads_each_store_once(self) -> None:
        usage_repo = FakeUsageRepository([usage(100, "2024-01-01")])
        bill_repo = FakeBillRepository([bill(10, "2024-01-31", 1000)])
        report = await UsageAnalytics(usage_repo, bill_repo).generate_usage_report()
        assert usage_repo.reads == 1
        assert bill_repo.reads == 1
        # Summary and analyses describe the same rows
        assert report.trends[0].total_usage == report.summary.total_usage

    @pytest.mark.asyncio
    async def test_unanalysable_rows_surface_as_data_access_error(self) -> None:
        corrupt = FakeUsageRepository([usage(10, "not-a-date")])
        with pytest.raises(DataAccessError):
            await UsageAnalytics(corrupt, FakeBillRepository()).generate_usage_report()

    @pytest.mark.asyncio
    async def test_unchanged_store_gives_identical_reports(self, analytics) -> None:
        first = await analytics.generate_usage_report()
        second = await analytics.generate_usage_report()
        assert first == second
