"""Sheet model, schema resolution and row reconciliation."""

from .models import Row, Sheet, SheetMetadata
from .reconcile import (
    ReconcileStrategy,
    build_reset_rows,
    build_template_row,
    clean,
    is_empty_row,
    merge,
)
from .schema import (
    DEFAULT_COLUMN_WIDTH,
    DEFAULT_SCHEMA,
    resolve_column_widths,
    resolve_columns,
)

__all__ = [
    "DEFAULT_COLUMN_WIDTH",
    "DEFAULT_SCHEMA",
    "ReconcileStrategy",
    "Row",
    "Sheet",
    "SheetMetadata",
    "build_reset_rows",
    "build_template_row",
    "clean",
    "is_empty_row",
    "merge",
    "resolve_column_widths",
    "resolve_columns",
]
