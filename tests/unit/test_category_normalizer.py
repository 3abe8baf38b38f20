"""Unit tests for category label normalization."""

import pytest

from src.lib.config import SUB_CATEGORY_ALIASES
from src.models import CategoryPresets, CategoryTypes, LedgerKind
from src.services.category_normalizer import (
    allowed_main_categories,
    clean_label,
    find_category_mismatch,
    resolve_category,
    savings_categories,
)


@pytest.mark.unit
class TestCleanLabel:
    """Test suite for clean_label."""

    def test_trims_whitespace(self):
        assert clean_label("  식비 ") == "식비"

    def test_known_aliases(self):
        """Corrupted spellings are repaired."""
        assert clean_label("유류통") == "유류교통비"
        assert clean_label("저축성지출출") == "저축성지출"
        assert clean_label("시장/미트") == "시장/마트"

    def test_stray_characters_before_alias_lookup(self):
        """Stray punctuation is ignored when matching an alias."""
        assert clean_label("유류통?") == "유류교통비"

    def test_unknown_label_kept(self):
        """Labels that match nothing are only trimmed."""
        assert clean_label(" 취미! ") == "취미!"

    def test_empty(self):
        assert clean_label(None) == ""
        assert clean_label("") == ""

    def test_sub_category_aliases(self):
        """Sub-category typos use their own map."""
        assert clean_label("유트브", SUB_CATEGORY_ALIASES) == "유튜브"
        assert clean_label("건", SUB_CATEGORY_ALIASES) == "물건"


@pytest.mark.unit
class TestVocabulary:
    """Test suite for savings and allowed categories."""

    def test_default_savings_category(self):
        assert savings_categories(CategoryPresets()) == ("저축성지출",)

    def test_configured_savings_categories(self):
        presets = CategoryPresets(category_types=CategoryTypes(savings=("적금", "연금")))

        assert savings_categories(presets) == ("적금", "연금")

    def test_allowed_by_kind(self, category_presets):
        """Savings categories are valid for expenses and transfers, not income."""
        assert allowed_main_categories(LedgerKind.INCOME, category_presets) == ("급여", "배당")
        assert "저축성지출" in allowed_main_categories(LedgerKind.EXPENSE, category_presets)
        assert "저축성지출" in allowed_main_categories(LedgerKind.TRANSFER, category_presets)


@pytest.mark.unit
class TestResolveCategory:
    """Test suite for resolve_category."""

    def test_wrapper_main_unwrapped(self, make_entry, category_presets):
        """A generic main label is replaced by the sub-category."""
        entry = make_entry("e1", "income", 100, category="income", sub_category="급여")

        resolved = resolve_category(entry, category_presets)

        assert resolved.main == "급여"
        assert resolved.sub is None
        assert resolved.unwrapped

    def test_known_main_wins_over_wrapper(self, make_entry, category_presets):
        """A wrapper label that is also in the vocabulary is kept."""
        entry = make_entry("e1", "transfer", 100, category="이체", sub_category="적금")

        resolved = resolve_category(entry, category_presets)

        assert resolved.main == "이체"
        assert resolved.sub == "적금"
        assert not resolved.unwrapped

    def test_wrapper_sub_dropped(self, make_entry, category_presets):
        """A generic sub-category carries no information."""
        entry = make_entry("e1", "expense", 100, category="식비", sub_category="지출")

        resolved = resolve_category(entry, category_presets)

        assert resolved.main == "식비"
        assert resolved.sub is None

    def test_wrapper_without_sub_left_alone(self, make_entry, category_presets):
        """Nothing to unwrap without a sub-category."""
        entry = make_entry("e1", "expense", 100, category="지출")

        assert resolve_category(entry, category_presets).main == "지출"


@pytest.mark.unit
class TestFindCategoryMismatch:
    """Test suite for find_category_mismatch."""

    def test_sub_category_alias_applied(self, make_entry):
        """A corrupted sub-category is repaired before the group check."""
        presets = CategoryPresets(
            expense=("식비",), expense_details=({"main": "식비", "subs": ("식비",)},)
        )
        entry = make_entry("e1", "expense", 100, category="식비", sub_category="식")

        assert find_category_mismatch(entry, presets) is None

    def test_main_without_detail_group(self, make_entry, category_presets):
        """Sub-categories are free when the main has no detail group."""
        entry = make_entry("e1", "expense", 100, category="주거비", sub_category="관리비")

        assert find_category_mismatch(entry, category_presets) is None

    def test_income_sub_category_not_checked(self, make_entry, category_presets):
        """Only expense sub-categories have a vocabulary."""
        entry = make_entry("e1", "income", 100, category="급여", sub_category="보너스")

        assert find_category_mismatch(entry, category_presets) is None

    def test_mismatch_payload(self, make_entry, category_presets):
        entry = make_entry("e1", "income", 100, category="용돈")

        mismatch = find_category_mismatch(entry, category_presets)

        assert mismatch.entry_id == "e1"
        assert mismatch.kind == "income"
        assert mismatch.expected_main == ("급여", "배당")
        assert mismatch.expected_subs is None
