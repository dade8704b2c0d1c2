"""
ID 생성: run_id

run_id는 생성 1회마다 새로 발급 (로그 파일명으로 사용).
"""

import uuid
from datetime import UTC, datetime

from crud_scaffold.domain.constants import RUN_ID_PREFIX


def generate_run_id(module_name: str = "", entity_name: str = "") -> str:
    """
    Run ID 생성.

    고유성 보장: UUID v4
    포맷: RUN-{timestamp}-{module}-{entity}-{uuid[:8]}
    (module/entity가 없으면 생략)

    Returns:
        run_id 문자열
    """
    now = datetime.now(UTC)
    timestamp = now.strftime("%Y%m%d%H%M%S")
    unique = uuid.uuid4().hex[:8]

    parts = [timestamp]
    for value in (module_name, entity_name):
        if value:
            parts.append(_sanitize_for_id(value))
    parts.append(unique)

    return RUN_ID_PREFIX + "-".join(parts)


def _sanitize_for_id(value: str) -> str:
    """
    ID에 사용할 수 있도록 문자열 정리.

    - ASCII 알파벳/숫자만 유지
    - 최대 20자
    """
    sanitized = "".join(c for c in value if c.isascii() and c.isalnum())
    return sanitized[:20] if sanitized else "UNKNOWN"
