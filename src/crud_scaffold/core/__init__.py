"""
Core layer: 이름 파생, placeholder 테이블, 출력, run log.

역할:
- seed → 이름 파생형 (naming.py)
- seed → placeholder 테이블 (placeholders.py)
- 원자적 쓰기 + 출력 충돌 가드 (atomic.py, emitter.py)
- run id, 해시, run log (ids.py, hashing.py, logging.py)
"""

from .atomic import atomic_write_json, atomic_write_text
from .emitter import OutputEmitter
from .hashing import compute_table_hash, compute_text_hash
from .ids import generate_run_id
from .logging import complete_report, create_report, emit_finding, list_reports, load_report, save_report
from .naming import NameForms, derive_forms, is_plural_suspect, pluralize
from .placeholders import DERIVED_KEYS, PlaceholderTable, build_placeholder_table, validate_seeds

__all__ = [
    # naming
    "NameForms",
    "derive_forms",
    "pluralize",
    "is_plural_suspect",
    # placeholders
    "PlaceholderTable",
    "DERIVED_KEYS",
    "build_placeholder_table",
    "validate_seeds",
    # atomic / emitter
    "atomic_write_json",
    "atomic_write_text",
    "OutputEmitter",
    # ids / hashing
    "generate_run_id",
    "compute_table_hash",
    "compute_text_hash",
    # logging
    "create_report",
    "emit_finding",
    "complete_report",
    "save_report",
    "load_report",
    "list_reports",
]
