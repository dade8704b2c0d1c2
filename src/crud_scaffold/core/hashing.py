"""
해시 계산: 출력 내용, placeholder 테이블.

규칙:
- 정렬된 키로 직렬화
- SHA-256
- 같은 seed → 같은 table_hash (결정론 확인용)
"""

import hashlib
import json
from collections.abc import Mapping


def compute_text_hash(text: str) -> str:
    """
    UTF-8 텍스트 해시.

    Args:
        text: 렌더 결과

    Returns:
        SHA-256 해시 문자열
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def compute_table_hash(table: Mapping[str, str]) -> str:
    """
    placeholder 테이블 해시.

    - 정렬된 키로 직렬화
    - SHA-256

    Args:
        table: placeholder 테이블

    Returns:
        SHA-256 해시 문자열
    """
    serialized = json.dumps(dict(table), sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(serialized.encode()).hexdigest()
