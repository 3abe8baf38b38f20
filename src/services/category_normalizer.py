"""Category label normalization for ledger entries.

Imported ledgers carry a mix of typos, stray characters and "wrapper"
categories: a generic label such as 수입 or transfer stored in ``category``
with the real classification in ``sub_category`` (and occasionally the other
way around). All of that is resolved in :func:`resolve_category` so the
integrity checker only ever compares clean labels.

Precedence: a main category that is already in the preset vocabulary is kept
as-is. Only when it is not, and it is a wrapper label for the entry's kind,
is the sub-category promoted to the main category.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from src.lib.config import (
    CATEGORY_ALIASES,
    DEFAULT_SAVINGS_CATEGORIES,
    SUB_CATEGORY_ALIASES,
    WRAPPER_CATEGORIES,
)
from src.models.category_presets import CategoryPresets
from src.models.integrity import CategoryMismatch
from src.models.ledger_entry import LedgerEntry, LedgerKind

logger = logging.getLogger(__name__)

_BROKEN_CHARS = re.compile(r"[^\w/]")


@dataclass(frozen=True)
class ResolvedCategory:
    """Normalized labels of one entry.

    Attributes:
        main: Main category after cleanup and unwrapping
        sub: Sub-category (None when absent or promoted to main)
        unwrapped: True when a wrapper label was replaced by the sub-category
    """

    main: str
    sub: Optional[str]
    unwrapped: bool = False


def clean_label(label: Optional[str], aliases: dict[str, str] | None = None) -> str:
    """
    Trim a label and repair known corrupted spellings.

    Args:
        label: Raw label
        aliases: Typo map (default: main-category aliases)

    Returns:
        Cleaned label ("" for empty input)

    Examples:
        >>> clean_label("  식비 ")
        '식비'
        >>> clean_label("시장/미트")
        '시장/마트'
    """
    if aliases is None:
        aliases = CATEGORY_ALIASES
    if not label:
        return ""

    trimmed = label.strip()
    if trimmed in aliases:
        return aliases[trimmed]

    stripped = _BROKEN_CHARS.sub("", trimmed)
    return aliases.get(stripped, trimmed)


def savings_categories(presets: CategoryPresets) -> tuple[str, ...]:
    types = presets.category_types
    if types is not None and types.savings is not None:
        return types.savings
    return DEFAULT_SAVINGS_CATEGORIES


def allowed_main_categories(kind: LedgerKind, presets: CategoryPresets) -> tuple[str, ...]:
    """Main-category vocabulary for a ledger kind.

    Savings categories are accepted for expenses and transfers alike.
    """
    if kind == LedgerKind.INCOME:
        return presets.income
    if kind == LedgerKind.TRANSFER:
        return presets.transfer + savings_categories(presets)
    return presets.expense + savings_categories(presets)


def resolve_category(entry: LedgerEntry, presets: CategoryPresets) -> ResolvedCategory:
    """
    Normalize an entry's category pair against the preset vocabulary.

    Args:
        entry: Ledger entry
        presets: Category presets

    Returns:
        ResolvedCategory with the labels to validate
    """
    main = clean_label(entry.category)
    sub = clean_label(entry.sub_category, SUB_CATEGORY_ALIASES) or None
    wrappers = WRAPPER_CATEGORIES.get(entry.kind.value, ())

    if sub is not None and sub.lower() in wrappers:
        sub = None

    allowed = allowed_main_categories(entry.kind, presets)
    if main not in allowed and main.lower() in wrappers and sub is not None:
        logger.debug(f"Entry {entry.id}: wrapper category {main!r} resolved to {sub!r}")
        return ResolvedCategory(main=sub, sub=None, unwrapped=True)

    return ResolvedCategory(main=main, sub=sub)


def find_category_mismatch(
    entry: LedgerEntry, presets: CategoryPresets
) -> Optional[CategoryMismatch]:
    """
    Check one entry against the preset vocabulary.

    Entries without a main category are not checked.

    Args:
        entry: Ledger entry
        presets: Category presets

    Returns:
        CategoryMismatch, or None when the entry conforms
    """
    resolved = resolve_category(entry, presets)
    if not resolved.main:
        return None

    allowed = allowed_main_categories(entry.kind, presets)
    if resolved.main not in allowed:
        return CategoryMismatch(
            entry_id=entry.id,
            kind=entry.kind.value,
            category=resolved.main,
            sub_category=resolved.sub,
            expected_main=allowed,
        )

    if entry.kind != LedgerKind.EXPENSE or resolved.sub is None:
        return None

    group = presets.detail_group(resolved.main)
    if group is not None and resolved.sub not in group.subs:
        return CategoryMismatch(
            entry_id=entry.id,
            kind=entry.kind.value,
            category=resolved.main,
            sub_category=resolved.sub,
            expected_main=allowed,
            expected_subs=group.subs,
        )

    return None
