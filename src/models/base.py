"""Shared pydantic configuration for snapshot models.

Snapshot records are immutable and accept both snake_case field names and the
camelCase keys used by the household ledger's JSON document.
"""

from decimal import Decimal
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.lib.config import DEFAULT_CURRENCY
from src.lib.validators import validate_currency


def _coerce_currency(value: object) -> object:
    """Treat missing/blank currency as the default and normalize case."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_CURRENCY
    if isinstance(value, str):
        return validate_currency(value)
    return value


def _coerce_optional_currency(value: object) -> object:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _coerce_currency(value)


# Non-finite values are accepted so malformed records reach the integrity
# checker instead of failing construction.
Money = Annotated[Decimal, Field(allow_inf_nan=True)]

Currency = Annotated[Literal["KRW", "USD"], BeforeValidator(_coerce_currency)]
OptionalCurrency = Annotated[
    Optional[Literal["KRW", "USD"]], BeforeValidator(_coerce_optional_currency)
]


class SnapshotModel(BaseModel):
    """Base class for immutable snapshot records."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )
