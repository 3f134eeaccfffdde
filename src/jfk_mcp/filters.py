"""フィールド単位のフィルタ文法（text / keyword / date / number）。

各種別は operator をタグとする判別共用体（pydantic の discriminated union）として定義し、
種別ごとの検証関数 validate_*_filter() は例外ではなく ValidationResult を返す。

- 日付の値は検証時に一度だけ datetime.date へ変換される（以降は常に date を保持）。
- isNull は値を持たない。value を伴う isNull は拒否する。
- between の上下限の大小関係は検証しない。
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Final, Generic, Literal, TypeVar, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictStr,
    TypeAdapter,
    ValidationError,
)

from .errors import describe_validation_error

T = TypeVar("T")

_ISO_DATE_RE: Final[re.Pattern[str]] = re.compile(r"\d{4}-\d{2}-\d{2}")


def _parse_calendar_date(value: Any) -> Any:
    # datetime は date のサブクラスなので先に弾く
    if isinstance(value, datetime):
        raise ValueError("expected a calendar date without a time component")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE_RE.fullmatch(value):
        raise ValueError("expected a date string in YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"invalid calendar date: {value}") from e


CalendarDate = Annotated[date, BeforeValidator(_parse_calendar_date)]


def _ensure_number(value: Any) -> Any:
    # bool は int のサブクラスだが数値としては扱わない
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("expected a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError("expected a finite number")
    return value


Number = Annotated[Union[int, float], BeforeValidator(_ensure_number)]


class _FilterModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class IsNullFilter(_FilterModel):
    operator: Literal["isNull"]


# --- text -------------------------------------------------------------------


class TextContainsFilter(_FilterModel):
    operator: Literal["contains"]
    value: StrictStr = Field(description="Substring to search within text fields")


TextFilter = Annotated[
    Union[TextContainsFilter, IsNullFilter],
    Field(discriminator="operator", description="Filter for text fields (contains or isNull)"),
]


# --- keyword ----------------------------------------------------------------


class KeywordEqFilter(_FilterModel):
    operator: Literal["eq"]
    value: StrictStr = Field(description="Exact match for a keyword")


KeywordFilter = Annotated[
    Union[KeywordEqFilter, IsNullFilter],
    Field(discriminator="operator", description="Filter for keyword fields (equality or isNull)"),
]


# --- date -------------------------------------------------------------------


class DateCompareFilter(_FilterModel):
    operator: Literal["gte", "lte", "gt", "lt", "eq"]
    value: CalendarDate = Field(description="A date value for comparison")


class DateBetweenFilter(_FilterModel):
    operator: Literal["between"]
    value: tuple[CalendarDate, CalendarDate] = Field(description="Tuple with start and end date")


DateFilter = Annotated[
    Union[DateCompareFilter, DateBetweenFilter, IsNullFilter],
    Field(discriminator="operator", description="Filter for date fields (with various operators)"),
]


# --- number -----------------------------------------------------------------


class NumberCompareFilter(_FilterModel):
    operator: Literal["eq", "gt", "lt", "gte", "lte"]
    value: Number = Field(description="Number to compare against")


class NumberBetweenFilter(_FilterModel):
    operator: Literal["between"]
    value: tuple[Number, Number] = Field(description="Tuple defining lower and upper bounds")


NumberFilter = Annotated[
    Union[NumberCompareFilter, NumberBetweenFilter],
    Field(discriminator="operator", description="Filter for numeric fields"),
]


# --- validation -------------------------------------------------------------


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """検証結果。成功時は value、失敗時は errors（"<パス>: <理由>" の列）を持つ。"""

    value: T | None = None
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


def run_adapter(adapter: TypeAdapter[Any], raw: Any) -> ValidationResult[Any]:
    try:
        return ValidationResult(value=adapter.validate_python(raw))
    except ValidationError as e:
        return ValidationResult(errors=describe_validation_error(e))


_TEXT_ADAPTER: Final[TypeAdapter[Any]] = TypeAdapter(TextFilter)
_KEYWORD_ADAPTER: Final[TypeAdapter[Any]] = TypeAdapter(KeywordFilter)
_DATE_ADAPTER: Final[TypeAdapter[Any]] = TypeAdapter(DateFilter)
_NUMBER_ADAPTER: Final[TypeAdapter[Any]] = TypeAdapter(NumberFilter)


def validate_text_filter(raw: Any) -> ValidationResult[TextContainsFilter | IsNullFilter]:
    return run_adapter(_TEXT_ADAPTER, raw)


def validate_keyword_filter(raw: Any) -> ValidationResult[KeywordEqFilter | IsNullFilter]:
    return run_adapter(_KEYWORD_ADAPTER, raw)


def validate_date_filter(
    raw: Any,
) -> ValidationResult[DateCompareFilter | DateBetweenFilter | IsNullFilter]:
    """日付フィルタを検証する。成功時の value は文字列ではなく date を保持する。"""
    return run_adapter(_DATE_ADAPTER, raw)


def validate_number_filter(
    raw: Any,
) -> ValidationResult[NumberCompareFilter | NumberBetweenFilter]:
    return run_adapter(_NUMBER_ADAPTER, raw)


class FieldKind(str, Enum):
    TEXT = "text"
    KEYWORD = "keyword"
    DATE = "date"
    NUMBER = "number"


FILTER_TYPES: Final[dict[FieldKind, Any]] = {
    FieldKind.TEXT: TextFilter,
    FieldKind.KEYWORD: KeywordFilter,
    FieldKind.DATE: DateFilter,
    FieldKind.NUMBER: NumberFilter,
}


__all__ = [
    "CalendarDate",
    "DateBetweenFilter",
    "DateCompareFilter",
    "DateFilter",
    "FILTER_TYPES",
    "FieldKind",
    "IsNullFilter",
    "KeywordEqFilter",
    "KeywordFilter",
    "Number",
    "NumberBetweenFilter",
    "NumberCompareFilter",
    "NumberFilter",
    "TextContainsFilter",
    "TextFilter",
    "ValidationResult",
    "validate_date_filter",
    "validate_keyword_filter",
    "validate_number_filter",
    "validate_text_filter",
]
