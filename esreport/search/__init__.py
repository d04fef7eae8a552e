"""Log search: fetching, flattening and shaping query results."""

from .client import ElasticsearchClient
from .paginator import Paginator
from .rules import RuleEngine
from .schemas import LogProcessResult, LogQueryRequest, RuleFunction
from .service import LogReportService
from .table import Table

__all__ = [
    "ElasticsearchClient",
    "LogProcessResult",
    "LogQueryRequest",
    "LogReportService",
    "Paginator",
    "RuleEngine",
    "RuleFunction",
    "Table",
]
