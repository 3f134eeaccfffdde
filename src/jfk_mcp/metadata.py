"""JFK 文書のメタデータフィルタ。

フィールド名 → (種別, 説明) の対応表を唯一の情報源とし、
全文検索/メタデータ検索用（JFK_FILTER_FIELDS）とベクトル検索用（VECTOR_FILTER_FIELDS）の
2 つの許可キー集合からそれぞれモデルを生成する。
ベクトル検索では comments を許可キーに含めない（指定された場合は検証エラー）。
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from .errors import describe_validation_error
from .filters import FILTER_TYPES, FieldKind, ValidationResult


@dataclass(frozen=True)
class FieldSpec:
    kind: FieldKind
    description: str


# 基本フィールドは全文書種別で共通
BASE_FIELDS: Final[dict[str, FieldSpec]] = {
    "link": FieldSpec(FieldKind.KEYWORD, "Filter by link using keyword equality or null check"),
    "link_id": FieldSpec(FieldKind.KEYWORD, "Filter by link_id using keyword equality or null check"),
    "page_id": FieldSpec(FieldKind.KEYWORD, "Filter by page_id using keyword equality or null check"),
}

FIELD_SPECS: Final[dict[str, FieldSpec]] = {
    **BASE_FIELDS,
    "comments": FieldSpec(FieldKind.TEXT, "Filter on comments using text operators"),
    "document_date": FieldSpec(FieldKind.DATE, "Filter by document date"),
    "document_type": FieldSpec(FieldKind.KEYWORD, "Filter by document type"),
    "file_name": FieldSpec(FieldKind.KEYWORD, "Filter by file name"),
    "file_number": FieldSpec(FieldKind.KEYWORD, "Filter by file number"),
    "formerly_withheld": FieldSpec(FieldKind.KEYWORD, "Filter by formerly withheld status"),
    "from_name": FieldSpec(FieldKind.KEYWORD, "Filter by originating name"),
    "nara_release_date": FieldSpec(FieldKind.DATE, "Filter by NARA release date"),
    "originator": FieldSpec(FieldKind.KEYWORD, "Filter by originator"),
    "pages_released": FieldSpec(FieldKind.NUMBER, "Filter by number of pages released"),
    "page_count": FieldSpec(FieldKind.NUMBER, "Filter by total page count"),
    "record_number": FieldSpec(FieldKind.KEYWORD, "Filter by record number"),
    "review_date": FieldSpec(FieldKind.DATE, "Filter by review date"),
    "to_name": FieldSpec(FieldKind.KEYWORD, "Filter by destination name"),
}

JFK_FILTER_FIELDS: Final[tuple[str, ...]] = (
    "link",
    "link_id",
    "page_id",
    "comments",
    "document_date",
    "document_type",
    "file_name",
    "file_number",
    "formerly_withheld",
    "from_name",
    "nara_release_date",
    "originator",
    "pages_released",
    "page_count",
    "record_number",
    "review_date",
    "to_name",
)

# For vector search, filtering by comments is not supported.
VECTOR_FILTER_FIELDS: Final[tuple[str, ...]] = (
    "link",
    "link_id",
    "page_id",
    "document_date",
    "document_type",
    "file_name",
    "file_number",
    "formerly_withheld",
    "from_name",
    "nara_release_date",
    "originator",
    "pages_released",
    "page_count",
    "record_number",
    "review_date",
    "to_name",
)


class MetadataFilterBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    def active_fields(self) -> dict[str, Any]:
        """指定されたフィールドのみを検証済みフィルタとして返す。"""
        return {name: getattr(self, name) for name in self.model_fields_set}

    def to_payload(self) -> dict[str, Any]:
        """バックエンド送信用の dict（未指定フィールドは含めず、日付は ISO 文字列）。"""
        return self.model_dump(mode="json", include=self.model_fields_set)


def _build_filter_model(name: str, doc: str, fields: tuple[str, ...]) -> type[MetadataFilterBase]:
    # 型注釈は Optional にしない: 未指定は None、明示的な null は拒否される
    definitions: dict[str, Any] = {
        field_name: (
            FILTER_TYPES[FIELD_SPECS[field_name].kind],
            Field(default=None, description=FIELD_SPECS[field_name].description),
        )
        for field_name in fields
    }
    model = create_model(name, __base__=MetadataFilterBase, __doc__=doc, **definitions)
    return model


JFKMetadataFilter = _build_filter_model(
    "JFKMetadataFilter", "Metadata filters specific to JFK documents", JFK_FILTER_FIELDS
)
VectorMetadataFilter = _build_filter_model(
    "VectorMetadataFilter",
    "Metadata filters for JFK documents (excluding comments) for vector search",
    VECTOR_FILTER_FIELDS,
)


def _compose(model: type[MetadataFilterBase], raw: Any) -> ValidationResult[MetadataFilterBase]:
    if not isinstance(raw, (Mapping, model)):
        return ValidationResult(errors=("metadata: expected an object of field filters",))
    try:
        return ValidationResult(value=model.model_validate(raw))
    except ValidationError as e:
        return ValidationResult(errors=describe_validation_error(e))


def compose_metadata_filter(raw: Any) -> ValidationResult[MetadataFilterBase]:
    """全フィールド（comments を含む）のメタデータフィルタを構築する。"""
    return _compose(JFKMetadataFilter, raw)


def compose_vector_metadata_filter(raw: Any) -> ValidationResult[MetadataFilterBase]:
    """ベクトル検索用のメタデータフィルタを構築する。comments は受け付けない。"""
    return _compose(VectorMetadataFilter, raw)


__all__ = [
    "BASE_FIELDS",
    "FIELD_SPECS",
    "FieldSpec",
    "JFKMetadataFilter",
    "JFK_FILTER_FIELDS",
    "MetadataFilterBase",
    "VECTOR_FILTER_FIELDS",
    "VectorMetadataFilter",
    "compose_metadata_filter",
    "compose_vector_metadata_filter",
]
