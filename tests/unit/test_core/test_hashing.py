"""
test_hashing.py - 해시 계산 테스트
"""

import hashlib

from crud_scaffold.core.hashing import compute_table_hash, compute_text_hash


class TestComputeTableHash:
    """compute_table_hash 함수 테스트."""

    def test_key_order_independent(self):
        """키 순서와 무관."""
        assert compute_table_hash({"A": "1", "B": "2"}) == compute_table_hash({"B": "2", "A": "1"})

    def test_value_change_detected(self):
        assert compute_table_hash({"A": "1"}) != compute_table_hash({"A": "2"})

    def test_accepts_placeholder_table(self, catalog_table):
        assert compute_table_hash(catalog_table) == compute_table_hash(catalog_table.to_dict())


class TestComputeTextHash:
    """compute_text_hash 함수 테스트."""

    def test_matches_written_bytes(self, tmp_path):
        """텍스트 해시 = 같은 내용으로 쓴 파일 바이트 해시."""
        text = "class Product {}\n"
        path = tmp_path / "a.cs"
        path.write_bytes(text.encode("utf-8"))

        assert compute_text_hash(text) == hashlib.sha256(path.read_bytes()).hexdigest()

    def test_sha256_hex(self):
        assert len(compute_text_hash("x")) == 64
