"""Pydantic schemas and page types for the log search module."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RuleFunction(str, Enum):
    """Aggregate functions understood by the rule engine."""

    DISTINCT = "Distinct"
    COUNT = "Count"
    GROUP = "Group"


# ===== REQUEST SCHEMAS =====


class TableHeader(BaseModel):
    """One output column."""

    label: str
    visibility: bool = True

    model_config = ConfigDict(from_attributes=True)

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Column label cannot be empty")
        return v


class LogQueryRequest(BaseModel):
    """Everything needed to turn one search into one table."""

    index_tag: str
    saved_query_id: Optional[str] = None
    lucene_query: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None

    table_headers: List[TableHeader] = []
    table_values: List[str] = []  # field paths, aligned with table_headers

    expr_exists: Optional[Dict[str, List[str]]] = None
    expr_not_exists: Optional[Dict[str, List[str]]] = None
    func: Optional[str] = None
    min_qty: Optional[int] = None
    sort: Optional[str] = None

    sort_field: Optional[str] = None
    query_size: int = Field(default=1000, ge=1, le=10000)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("index_tag")
    @classmethod
    def validate_index_tag(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Index tag cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_columns(self) -> "LogQueryRequest":
        if len(self.table_headers) != len(self.table_values):
            raise ValueError(
                f"table_headers ({len(self.table_headers)}) and table_values "
                f"({len(self.table_values)}) must have the same length"
            )
        labels = [header.label for header in self.table_headers]
        if len(set(labels)) != len(labels):
            raise ValueError("Duplicate column labels are not allowed")
        return self

    @property
    def column_labels(self) -> List[str]:
        return [header.label for header in self.table_headers]

    @property
    def hidden_columns(self) -> List[str]:
        return [header.label for header in self.table_headers if not header.visibility]


# ===== RESPONSE SCHEMAS =====


class LogProcessResult(BaseModel):
    """Rendered table returned by the process endpoint."""

    title: Optional[str] = None
    description: Optional[str] = None
    columns: List[str]
    rows: List[Dict[str, str]]
    row_count: int
    html: str


class SavedQuery(BaseModel):
    """Query text extracted from a saved search object."""

    query: str
    language: Optional[str] = None


# ===== BACKEND RESPONSE SHAPES =====


class SearchHit(BaseModel):
    index: Optional[str] = Field(default=None, alias="_index")
    id: Optional[str] = Field(default=None, alias="_id")
    score: Optional[float] = Field(default=None, alias="_score")
    source: Optional[Dict[str, Any]] = Field(default=None, alias="_source")
    sort: Optional[List[Any]] = None

    model_config = ConfigDict(populate_by_name=True)


class SearchHits(BaseModel):
    total: Optional[Dict[str, Any]] = None
    max_score: Optional[float] = None
    hits: List[SearchHit] = []


class SearchResponse(BaseModel):
    took: Optional[int] = None
    timed_out: Optional[bool] = None
    hits: SearchHits


class SavedObjectMeta(BaseModel):
    search_source_json: Optional[str] = Field(default=None, alias="searchSourceJSON")

    model_config = ConfigDict(populate_by_name=True)


class SavedObjectAttributes(BaseModel):
    title: str = ""
    kibana_saved_object_meta: Optional[SavedObjectMeta] = Field(
        default=None, alias="kibanaSavedObjectMeta"
    )

    model_config = ConfigDict(populate_by_name=True)


class SavedObjectResponse(BaseModel):
    id: str = ""
    type: str = ""
    attributes: Optional[SavedObjectAttributes] = None


class SearchSourceQuery(BaseModel):
    # Kibana stores DSL objects here for some languages; only strings are usable
    query: Any = None
    language: Optional[str] = None


class SearchSource(BaseModel):
    query: Optional[SearchSourceQuery] = None


# ===== PAGE TYPE =====


@dataclass(frozen=True)
class SearchPage:
    """One page of hits plus the cursor of its last hit."""

    documents: List[Optional[Dict[str, Any]]] = field(default_factory=list)
    cursor: Optional[List[Any]] = None

    @property
    def is_empty(self) -> bool:
        return not self.documents

    @property
    def has_more(self) -> bool:
        return not self.is_empty and bool(self.cursor)

    @classmethod
    def from_response(cls, response: SearchResponse) -> "SearchPage":
        hits = response.hits.hits
        cursor = hits[-1].sort if hits else None
        return cls(documents=[hit.source for hit in hits], cursor=cursor)
