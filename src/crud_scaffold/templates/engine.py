"""
치환 엔진: 템플릿 본문 + placeholder 테이블 → 결과 텍스트.

보장:
- 단일 패스, 비재귀: 삽입된 값은 다시 스캔하지 않음
- 구분자 경계 정확 매칭: ${ENTITY_NAME}은 ${ENTITY_NAME_LOWER} 안에서 매칭되지 않음
- 필수 placeholder 누락 → MissingRequiredPlaceholderError (누락 키 전체)
- 선택 블록 누락 → 빈 문자열 (블록만 있는 줄은 줄째 제거)
- 구문 오류 토큰 → TemplateSyntaxError (byte offset 포함)
"""

import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import PurePosixPath

from crud_scaffold.core.placeholders import PlaceholderTable
from crud_scaffold.domain.constants import PLACEHOLDER_PATTERN
from crud_scaffold.domain.errors import (
    ErrorCodes,
    MissingRequiredPlaceholderError,
    ScaffoldError,
    TemplateSyntaxError,
)
from crud_scaffold.domain.schemas import PlaceholderKind, Template
from crud_scaffold.templates.scanner import (
    detect_placeholders,
    find_malformed_tokens,
    is_optional_block,
)

logger = logging.getLogger(__name__)

INLINE_TEMPLATE_NAME = "<inline>"


def _check_syntax(text: str, template: str) -> None:
    malformed = find_malformed_tokens(text)
    if malformed:
        first = malformed[0]
        raise TemplateSyntaxError(template, first.offset, first.snippet)


def _has_required_value(table: Mapping[str, str], name: str) -> bool:
    """필수 placeholder 값 존재 여부 (블록으로 들어온 값은 제외)."""
    if name not in table:
        return False
    if isinstance(table, PlaceholderTable):
        return table.kind_of(name) != PlaceholderKind.OPTIONAL_BLOCK
    return True


def _strip_empty_block_lines(text: str, names: Iterable[str]) -> str:
    """
    값이 비어 있는 선택 블록이 혼자 있는 줄 제거.

    토큰 삭제만 하므로 단일 패스 보장에 영향 없음.
    """
    names = sorted(set(names))
    if not names:
        return text

    alternation = "|".join(re.escape(n) for n in names)
    pattern = re.compile(
        rf"^[ \t]*\$\{{(?:{alternation})\}}[ \t]*(?:\r?\n|\Z)",
        re.MULTILINE,
    )
    return pattern.sub("", text)


def render_text(
    text: str,
    table: Mapping[str, str],
    template: str = INLINE_TEMPLATE_NAME,
    declared_optional: Iterable[str] = (),
) -> str:
    """
    템플릿 텍스트 치환.

    Args:
        text: 템플릿 본문
        table: placeholder 테이블
        template: 에러 보고용 템플릿 이름
        declared_optional: manifest에 선언된 선택 블록

    Returns:
        치환된 텍스트

    Raises:
        TemplateSyntaxError: 구문 오류 토큰
        MissingRequiredPlaceholderError: 필수 값 누락
    """
    _check_syntax(text, template)

    declared = frozenset(declared_optional)
    names = detect_placeholders(text)

    missing = [
        n for n in names
        if not is_optional_block(n, declared) and not _has_required_value(table, n)
    ]
    if missing:
        raise MissingRequiredPlaceholderError(template, missing)

    empty_blocks = [
        n for n in names
        if is_optional_block(n, declared) and not table.get(n, "")
    ]
    if empty_blocks:
        logger.debug(f"{template}: optional blocks left empty: {empty_blocks}")
        text = _strip_empty_block_lines(text, empty_blocks)

    # re.sub는 원본 문자열만 스캔 → 삽입 값 재스캔 없음
    return PLACEHOLDER_PATTERN.sub(lambda m: table.get(m.group(1), ""), text)


def render_template(template: Template, table: Mapping[str, str]) -> str:
    """Template 객체 치환."""
    return render_text(
        template.text,
        table,
        template=template.name,
        declared_optional=template.declared_optional,
    )


def render_path(
    pattern: str,
    table: Mapping[str, str],
    template: str = INLINE_TEMPLATE_NAME,
) -> str:
    """
    출력 경로 패턴 치환.

    결과는 출력 루트 기준 상대 경로 (POSIX 구분자).

    Raises:
        TemplateSyntaxError, MissingRequiredPlaceholderError: render_text와 동일
        ScaffoldError: INVALID_OUTPUT_PATH (절대 경로, '..' 포함, 빈 경로)
    """
    rendered = render_text(pattern, table, template=template).strip()
    path = PurePosixPath(rendered.replace("\\", "/"))

    if not rendered or path.is_absolute() or ".." in path.parts or path.name == "":
        raise ScaffoldError(
            ErrorCodes.INVALID_OUTPUT_PATH,
            f"Output path must be a relative file path: {rendered!r}",
            template=template,
            pattern=pattern,
        )

    return path.as_posix()
