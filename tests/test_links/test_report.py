"""Tests for console rendering of annotation results."""

from typing import Any

import pytest
from rich.console import Console

from jira_links import annotate
from jira_links.links.models import LinkSpec
from jira_links.links.report import build_report_table, print_report


class TestReport:
    """Test report table and summary output."""

    @pytest.mark.asyncio
    async def test_print_report(
        self,
        sample_issues: dict[str, Any],
        link_specs: list[LinkSpec],
        failing_shortener_factory: Any,
    ) -> None:
        """Test that links, failures and the summary are printed."""
        shortener = failing_shortener_factory({"https://x/browse/AB-2"})
        result = await annotate(sample_issues, shortener, link_specs)
        console = Console(record=True, width=200, no_color=True)

        print_report(result, console)
        output = console.export_text()

        assert "AB-1" in output
        assert "sho.rt/https://x/browse/AB-1" in output
        assert "failed" in output
        assert "Summary: Shortened 3/4 links (1 failed, 0 missing)" in output

    @pytest.mark.asyncio
    async def test_table_columns(
        self,
        sample_issues: dict[str, Any],
        link_specs: list[LinkSpec],
        counting_shortener: Any,
    ) -> None:
        """Test one column per spec after the issue column."""
        result = await annotate(sample_issues, counting_shortener, link_specs)

        table = build_report_table(result)

        assert [column.header for column in table.columns] == [
            "Issue",
            "jira",
            "stash",
        ]
        assert table.row_count == 2
