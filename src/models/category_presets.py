"""Category vocabularies configured by the user."""

from typing import Optional

from src.models.base import SnapshotModel


class ExpenseDetailGroup(SnapshotModel):
    """Allowed sub-categories for one expense main category."""

    main: str
    subs: tuple[str, ...] = ()


class CategoryTypes(SnapshotModel):
    """Optional classification lists for fixed, savings, and transfer categories."""

    fixed: Optional[tuple[str, ...]] = None
    savings: Optional[tuple[str, ...]] = None
    transfer: Optional[tuple[str, ...]] = None


class CategoryPresets(SnapshotModel):
    """
    Category vocabularies for ledger entries.

    Attributes:
        income: Income main categories
        expense: Expense main categories
        expense_details: Nested expense sub-category groups
        transfer: Transfer main categories
        category_types: Optional fixed/savings/transfer classifications
    """

    income: tuple[str, ...] = ()
    expense: tuple[str, ...] = ()
    expense_details: tuple[ExpenseDetailGroup, ...] = ()
    transfer: tuple[str, ...] = ()
    category_types: Optional[CategoryTypes] = None

    def detail_group(self, main: str) -> Optional[ExpenseDetailGroup]:
        """Return the sub-category group for an expense main category."""
        for group in self.expense_details:
            if group.main == main:
                return group
        return None
