"""
Core domain layer: record set, column schema, table state and the table engine
"""

from .columns import ColumnSpec
from .dataset import RecordSet
from .table_engine import TableEngine
from .table_state import SortKey, TableState

__all__ = ["ColumnSpec", "RecordSet", "SortKey", "TableEngine", "TableState"]
