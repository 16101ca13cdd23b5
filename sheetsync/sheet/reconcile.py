"""Row classification, cleaning and merging.

A row is empty when every value, stripped, is blank. Whether a leading
empty row is a header depends on the ReconcileStrategy in use: older
documents kept one at position 0, newer ones keep column names in
metadata only. Neither layout is assumed; the strategy is configured.
"""

from enum import Enum

from .models import Row


def is_empty_row(row: Row) -> bool:
    """Check whether every value in a row is blank."""
    return not any(
        value is not None and str(value).strip() != "" for value in row.values()
    )


def clean(rows: list[Row]) -> list[Row]:
    """Remove empty rows, keeping the order of the rest."""
    return [row for row in rows if not is_empty_row(row)]


def merge(data_rows: list[Row], new_rows: list[Row]) -> list[Row]:
    """Append new rows after existing ones.

    No deduplication is done; appending the same rows twice stores them twice.
    """
    return [*data_rows, *new_rows]


def build_template_row(column_keys: list[str]) -> Row:
    """Build an all-blank row for the given columns."""
    return {key: "" for key in column_keys}


def build_reset_rows(column_keys: list[str], had_data: bool) -> list[Row]:
    """Rows written by a reset: one template row if there was data."""
    if had_data:
        return [build_template_row(column_keys)]
    return []


class ReconcileStrategy(Enum):
    """How a leading empty row is treated."""

    METADATA_ONLY = "metadata-only"
    LEGACY_HEADER_PRESERVING = "legacy-header-preserving"

    @classmethod
    def from_name(cls, name: str) -> "ReconcileStrategy":
        """Look up a strategy by config name.

        Accepts the value ("metadata-only") or the member name
        ("METADATA_ONLY"), case-insensitively.

        Raises:
            ValueError: If the name is unknown or not a string.
        """
        if not isinstance(name, str):
            raise ValueError(f"Reconcile strategy must be a string, got {name!r}")
        normalized = name.strip().lower().replace("_", "-")
        for strategy in cls:
            if strategy.value == normalized:
                return strategy
        choices = ", ".join(s.value for s in cls)
        raise ValueError(f"Unknown reconcile strategy {name!r} (expected one of: {choices})")

    @property
    def keeps_header(self) -> bool:
        return self is ReconcileStrategy.LEGACY_HEADER_PRESERVING

    def split(self, rows: list[Row]) -> tuple[Row | None, list[Row]]:
        """Separate the header row (if any) from cleaned data rows.

        Args:
            rows: Rows as fetched from the remote document.

        Returns:
            Tuple of (header_row_or_None, data_rows).
        """
        if self.keeps_header and rows and is_empty_row(rows[0]):
            return rows[0], clean(rows[1:])
        return None, clean(rows)

    def assemble(self, header: Row | None, rows: list[Row]) -> list[Row]:
        """Put a preserved header back in front of the rows."""
        if header is None:
            return list(rows)
        return [header, *rows]

    def initial_rows(self, column_keys: list[str], rows: list[Row]) -> list[Row]:
        """Rows for a freshly initialized sheet."""
        if self.keeps_header:
            return [build_template_row(column_keys), *rows]
        return list(rows)

    def reset_rows(
        self, column_keys: list[str], had_data: bool, header: Row | None = None
    ) -> list[Row]:
        """Rows written by a reset under this strategy.

        The legacy layout reuses its header row verbatim when one exists.
        """
        if self.keeps_header and had_data and header is not None:
            return [header]
        return build_reset_rows(column_keys, had_data)
