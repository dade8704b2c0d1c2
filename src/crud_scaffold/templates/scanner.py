"""
Placeholder 스캐너: 템플릿 본문 정적 분석.

역할:
- ${NAME} 토큰 감지 (등장 순서, 중복 제거)
- 구문 오류 토큰 감지 (닫히지 않은 `${`, 소문자/공백 포함 이름)
- 필수 / 선택 블록 분류

분류 규칙 (명시적 종류 태깅):
1. manifest에 선언된 선택 블록
2. 전역 선택 블록 이름 목록 (PROPERTIES 등)
3. 접두사 규칙 (ADDITIONAL_, CUSTOM_)
→ 해당 없으면 필수
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from crud_scaffold.domain.constants import (
    OPTIONAL_BLOCK_NAMES,
    OPTIONAL_BLOCK_PREFIXES,
    PLACEHOLDER_PATTERN,
    SNIPPET_MAX_LENGTH,
    TOKEN_START,
)
from crud_scaffold.domain.schemas import PlaceholderKind

# =============================================================================
# Types
# =============================================================================


@dataclass
class MalformedToken:
    """구문 오류 토큰."""

    offset: int  # UTF-8 byte offset
    snippet: str


@dataclass
class ScanResult:
    """템플릿 스캔 결과."""

    placeholders: list[str] = field(default_factory=list)
    required: list[str] = field(default_factory=list)
    optional: list[str] = field(default_factory=list)
    malformed: list[MalformedToken] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.malformed


# =============================================================================
# Placeholder Detection
# =============================================================================


def detect_placeholders(text: str) -> list[str]:
    """
    텍스트에서 placeholder 이름 감지.

    Args:
        text: 템플릿 본문

    Returns:
        placeholder 이름 목록 (등장 순서, 중복 제거)
    """
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(text)))


def has_placeholders(text: str) -> bool:
    """placeholder가 있는지 확인."""
    return bool(PLACEHOLDER_PATTERN.search(text))


def find_malformed_tokens(text: str) -> list[MalformedToken]:
    """
    `${`로 시작하지만 올바른 토큰이 아닌 위치 감지.

    Args:
        text: 템플릿 본문

    Returns:
        MalformedToken 목록 (byte offset 오름차순)
    """
    results = []
    pos = text.find(TOKEN_START)

    while pos != -1:
        match = PLACEHOLDER_PATTERN.match(text, pos)
        if match:
            pos = text.find(TOKEN_START, match.end())
            continue

        end = text.find("\n", pos)
        snippet = text[pos:end if end != -1 else len(text)][:SNIPPET_MAX_LENGTH]
        results.append(
            MalformedToken(
                offset=len(text[:pos].encode("utf-8")),
                snippet=snippet,
            )
        )
        pos = text.find(TOKEN_START, pos + len(TOKEN_START))

    return results


# =============================================================================
# Classification
# =============================================================================


def is_optional_block(name: str, declared: Iterable[str] = ()) -> bool:
    """선택 블록 여부."""
    if name in declared:
        return True
    if name in OPTIONAL_BLOCK_NAMES:
        return True
    return name.startswith(OPTIONAL_BLOCK_PREFIXES)


def classify_placeholder(name: str, declared: Iterable[str] = ()) -> PlaceholderKind:
    if is_optional_block(name, declared):
        return PlaceholderKind.OPTIONAL_BLOCK
    return PlaceholderKind.REQUIRED


def scan_template(text: str, declared_optional: Iterable[str] = ()) -> ScanResult:
    """
    템플릿 전체 스캔.

    Args:
        text: 템플릿 본문
        declared_optional: manifest에 선언된 선택 블록

    Returns:
        ScanResult
    """
    declared = frozenset(declared_optional)
    names = detect_placeholders(text)

    return ScanResult(
        placeholders=names,
        required=[n for n in names if not is_optional_block(n, declared)],
        optional=[n for n in names if is_optional_block(n, declared)],
        malformed=find_malformed_tokens(text),
    )
