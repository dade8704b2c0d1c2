"""
이름 파생: 대소문자 변형 + 복수형.

규칙:
- 복수형은 사전 조회가 아닌 끝 1~2글자 규칙 테이블 (휴리스틱)
- 불규칙 복수형 (Person → People)은 추측하지 않음 → override seed로 지정
- 휴리스틱이 틀리기 쉬운 어미는 is_plural_suspect()로 권고 경고만
"""

import re
from dataclasses import dataclass

VOWELS = frozenset("aeiou")

# s, x, z, ch, sh → es
SIBILANT_ENDINGS = ("s", "x", "z", "ch", "sh")

# 휴리스틱이 자주 틀리는 어미 (마지막 단어 기준, 소문자)
SUSPECT_ENDINGS = (
    "f", "fe", "man", "person", "child", "foot", "tooth",
    "mouse", "goose", "sis", "xis",
)

# 이미 복수형/불가산인 단어
ALREADY_PLURAL_WORDS = frozenset([
    "data", "media", "criteria", "news", "series", "species", "people",
    "children", "men", "women", "feet", "teeth", "mice", "geese",
    "information", "equipment", "staff", "metadata",
])

WORD_SPLIT_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z0-9]+")


@dataclass(frozen=True)
class NameForms:
    """PascalCase 이름 1개에서 파생된 형태들."""

    pascal: str  # Category
    lower: str  # category (첫 글자만 소문자, camelCase)
    lowercase: str  # category (전체 소문자)
    plural: str  # Categories
    lower_plural: str  # categories (camelCase)
    lowercase_plural: str  # categories (전체 소문자)
    plural_overridden: bool = False


def lower_first(name: str) -> str:
    """첫 글자만 소문자로 (ProductCategory → productCategory)."""
    return name[:1].lower() + name[1:]


def to_lower(name: str) -> str:
    """전체 소문자."""
    return name.lower()


def _suffix(text: str, upper: bool) -> str:
    return text.upper() if upper else text


def pluralize(word: str) -> str:
    """
    단순 영어 복수형.

    - 자음 + y → ies (Category → Categories)
    - s, x, z, ch, sh → es (Box → Boxes)
    - 그 외 → s

    끝 글자가 대문자면 접미사도 대문자 (CATEGORY → CATEGORIES).

    Args:
        word: 단수형

    Returns:
        복수형
    """
    if not word:
        return word

    lower = word.lower()
    upper = word[-1].isupper()

    if lower.endswith("y") and len(lower) >= 2 and lower[-2] not in VOWELS:
        return word[:-1] + _suffix("ies", upper)

    if lower.endswith(SIBILANT_ENDINGS):
        return word + _suffix("es", upper)

    return word + _suffix("s", upper)


def split_words(name: str) -> list[str]:
    """PascalCase/camelCase 단어 분리 (ProductCategory → [Product, Category])."""
    return WORD_SPLIT_PATTERN.findall(name)


def is_plural_suspect(word: str) -> bool:
    """
    휴리스틱 복수형이 틀렸을 가능성이 높은지 (권고용).

    마지막 단어 기준으로 판단:
    - 불규칙 어미 (Leaf, Knife, Person, Child, Analysis ...)
    - 자음 + o (Hero, Potato)
    - 이미 복수형/불가산 (Data, Media, Criteria)
    """
    words = split_words(word)
    last = (words[-1] if words else word).lower()
    if not last:
        return False

    if last in ALREADY_PLURAL_WORDS:
        return True

    if last.endswith(SUSPECT_ENDINGS):
        return True

    return len(last) >= 2 and last.endswith("o") and last[-2] not in VOWELS


def derive_forms(name: str, plural_override: str | None = None) -> NameForms:
    """
    이름 1개의 파생형 전체 계산.

    Args:
        name: PascalCase 이름
        plural_override: 명시적 복수형 (불규칙 복수형용)

    Returns:
        NameForms
    """
    plural = plural_override if plural_override else pluralize(name)
    return NameForms(
        pascal=name,
        lower=lower_first(name),
        lowercase=to_lower(name),
        plural=plural,
        lower_plural=lower_first(plural),
        lowercase_plural=to_lower(plural),
        plural_overridden=bool(plural_override),
    )
