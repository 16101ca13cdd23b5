"""Column-key and column-width resolution for sheets."""

import logging

from .models import Row, SheetMetadata

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_WIDTH = 50

# Known record shape of the generation log
DEFAULT_SCHEMA: list[str] = [
    "Timestamp",
    "Prompt",
    "Status",
    "DocumentPath",
    "TargetFolder",
    "SharePointFile",
    "SharePointPath",
    "ImageURL",
    "EDSURL",
    "AEMPreviewURL",
    "Source",
    "UserHost",
    "GeneratedText",
]


def resolve_columns(
    existing_rows: list[Row],
    preserved_metadata: SheetMetadata | None = None,
    default_schema: list[str] | None = None,
) -> list[str]:
    """Derive the ordered column keys for a sheet.

    The first existing row is authoritative; later rows are assumed to
    share its keys. Preserved metadata keys come next, then the default
    schema.

    Args:
        existing_rows: Rows already in the sheet (header row included).
        preserved_metadata: Metadata fetched with the sheet, if any.
        default_schema: Fallback columns. Defaults to DEFAULT_SCHEMA.

    Returns:
        A new list of column keys.
    """
    if existing_rows:
        return list(existing_rows[0].keys())
    if preserved_metadata is not None and preserved_metadata.column_keys:
        return list(preserved_metadata.column_keys)
    if default_schema is None:
        default_schema = DEFAULT_SCHEMA
    return list(default_schema)


def resolve_column_widths(
    column_keys: list[str],
    preserved_widths: list[int] | None = None,
    default_width: int = DEFAULT_COLUMN_WIDTH,
) -> list[int]:
    """Return preserved widths if they fit the columns, else defaults."""
    if preserved_widths is not None and len(preserved_widths) == len(column_keys):
        return list(preserved_widths)
    return [default_width] * len(column_keys)


def detect_schema_drift(
    column_keys: list[str], preserved_metadata: SheetMetadata | None
) -> bool:
    """Check whether the column count changed since the last write.

    A drift is only logged; the caller adopts the new column set.

    Returns:
        True if a previously recorded column count differs.
    """
    if preserved_metadata is None:
        return False

    previous = len(preserved_metadata.column_keys) or len(
        preserved_metadata.column_widths
    )
    if previous and previous != len(column_keys):
        logger.warning(
            f"Column count changed from {previous} to {len(column_keys)}, "
            f"adopting new schema"
        )
        return True
    return False
