"""
test_ids.py - run id 생성 테스트

DoD:
- run_id 고유성: 매 호출 시 다른 값
- 포맷: RUN-{timestamp}-{module}-{entity}-{uuid8}
"""

import re
from datetime import UTC, datetime

from crud_scaffold.core.ids import _sanitize_for_id, generate_run_id


class TestGenerateRunId:
    """generate_run_id 함수 테스트."""

    def test_unique(self):
        """매 호출 시 다른 값."""
        ids = {generate_run_id("Catalog", "Product") for _ in range(50)}

        assert len(ids) == 50

    def test_format(self):
        run_id = generate_run_id("Catalog", "Product")

        assert re.match(r"^RUN-\d{14}-Catalog-Product-[0-9a-f]{8}$", run_id)

    def test_without_names(self):
        """이름 없으면 timestamp + uuid만."""
        assert re.match(r"^RUN-\d{14}-[0-9a-f]{8}$", generate_run_id())

    def test_timestamp_is_utc_now(self):
        before = datetime.now(UTC).strftime("%Y%m%d%H%M%S")
        run_id = generate_run_id()
        after = datetime.now(UTC).strftime("%Y%m%d%H%M%S")

        timestamp = run_id.split("-")[1]
        assert before <= timestamp <= after


class TestSanitizeForId:
    """_sanitize_for_id 함수 테스트."""

    def test_strips_non_alnum(self):
        assert _sanitize_for_id("Sales.Order_1") == "SalesOrder1"

    def test_non_ascii_removed(self):
        assert _sanitize_for_id("제품") == "UNKNOWN"

    def test_max_length(self):
        assert len(_sanitize_for_id("A" * 50)) == 20
