"""
test_naming.py - 이름 파생 테스트

DoD:
- 자음 + y → ies, s/x/z/ch/sh → es, 그 외 → s
- _LOWER는 camelCase, _LOWERCASE는 전체 소문자
- override가 있으면 휴리스틱 무시
- 휴리스틱이 틀리기 쉬운 이름은 suspect
"""

import pytest

from crud_scaffold.core.naming import (
    derive_forms,
    is_plural_suspect,
    lower_first,
    pluralize,
    split_words,
)


class TestPluralize:
    """pluralize 함수 테스트."""

    @pytest.mark.parametrize(
        ("word", "expected"),
        [
            ("Category", "Categories"),
            ("Box", "Boxes"),
            ("Product", "Products"),
            ("Address", "Addresses"),
            ("Branch", "Branches"),
            ("Wish", "Wishes"),
            ("Quiz", "Quizes"),
            ("Day", "Days"),
            ("Key", "Keys"),
        ],
    )
    def test_suffix_rules(self, word, expected):
        """끝 글자 규칙 테이블."""
        assert pluralize(word) == expected

    def test_compound_name_uses_last_letters(self):
        """복합 이름도 끝 글자 기준."""
        assert pluralize("ProductCategory") == "ProductCategories"

    def test_upper_case_suffix(self):
        """끝 글자가 대문자면 접미사도 대문자."""
        assert pluralize("CATEGORY") == "CATEGORIES"
        assert pluralize("TAX") == "TAXES"

    def test_empty(self):
        """빈 문자열 → 빈 문자열."""
        assert pluralize("") == ""


class TestLowerFirst:
    """lower_first 함수 테스트."""

    def test_camel_case(self):
        assert lower_first("ProductCategory") == "productCategory"

    def test_single_letter(self):
        assert lower_first("A") == "a"


class TestSplitWords:
    """split_words 함수 테스트."""

    def test_pascal_case(self):
        assert split_words("ProductCategory") == ["Product", "Category"]

    def test_acronym(self):
        assert split_words("HTTPRequest") == ["HTTP", "Request"]


class TestDeriveForms:
    """derive_forms 함수 테스트."""

    def test_all_forms(self):
        """Category → 6개 파생형."""
        forms = derive_forms("ProductCategory")

        assert forms.pascal == "ProductCategory"
        assert forms.lower == "productCategory"
        assert forms.lowercase == "productcategory"
        assert forms.plural == "ProductCategories"
        assert forms.lower_plural == "productCategories"
        assert forms.lowercase_plural == "productcategories"
        assert forms.plural_overridden is False

    def test_override_wins(self):
        """override가 휴리스틱보다 우선."""
        forms = derive_forms("Person", "People")

        assert forms.plural == "People"
        assert forms.lower_plural == "people"
        assert forms.plural_overridden is True

    def test_deterministic(self):
        """같은 입력 → 같은 결과."""
        assert derive_forms("Box") == derive_forms("Box")


class TestIsPluralSuspect:
    """is_plural_suspect 함수 테스트."""

    @pytest.mark.parametrize("word", ["Person", "Leaf", "Knife", "Child", "Analysis", "Hero", "Data"])
    def test_suspect(self, word):
        """불규칙/이미 복수형 → suspect."""
        assert is_plural_suspect(word) is True

    @pytest.mark.parametrize("word", ["Product", "Category", "Box", "Order", "Radio", "Catalog"])
    def test_regular(self, word):
        """규칙 복수형 → suspect 아님."""
        assert is_plural_suspect(word) is False

    def test_uses_last_word(self):
        """복합 이름은 마지막 단어 기준."""
        assert is_plural_suspect("SalesPerson") is True
        assert is_plural_suspect("PersonAddress") is False
