"""Sheet document model and its JSON wire form.

The remote document stores rows under ``data`` and metadata as
colon-prefixed document attributes (``:type``, ``:sheetname``,
``:colWidths`` and optionally ``:columns``).
"""

from dataclasses import dataclass, field
from typing import Any

Row = dict[str, str]

DOCUMENT_TYPE = "sheet"
DEFAULT_SHEET_NAME = "data"


@dataclass
class SheetMetadata:
    """Document-level attributes stored next to the rows."""

    document_type: str = DOCUMENT_TYPE
    sheet_name: str = DEFAULT_SHEET_NAME
    column_widths: list[int] = field(default_factory=list)
    column_keys: list[str] = field(default_factory=list)


@dataclass
class Sheet:
    """A full tabular document, synchronized as one unit."""

    data: list[Row] = field(default_factory=list)
    metadata: SheetMetadata = field(default_factory=SheetMetadata)
    total: int = 0
    limit: int = 0
    offset: int = 0

    @classmethod
    def build(
        cls,
        rows: list[Row],
        column_keys: list[str],
        column_widths: list[int],
        sheet_name: str = DEFAULT_SHEET_NAME,
    ) -> "Sheet":
        """Create a sheet whose counters match its rows."""
        return cls(
            data=list(rows),
            metadata=SheetMetadata(
                sheet_name=sheet_name,
                column_widths=list(column_widths),
                column_keys=list(column_keys),
            ),
            total=len(rows),
            limit=len(rows),
            offset=0,
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to the JSON document uploaded to the remote store."""
        count = len(self.data)
        document: dict[str, Any] = {
            "total": count,
            "limit": count,
            "offset": 0,
            "data": [dict(row) for row in self.data],
            ":type": self.metadata.document_type,
            ":sheetname": self.metadata.sheet_name,
            ":colWidths": list(self.metadata.column_widths),
        }
        if self.metadata.column_keys:
            document[":columns"] = list(self.metadata.column_keys)
        return document

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Sheet":
        """Create from a fetched JSON document.

        Missing metadata falls back to ``"sheet"``/``"data"`` and empty
        width/column lists. Cell values are coerced to strings.
        """
        rows = [
            {str(key): _cell(value) for key, value in row.items()}
            for row in document.get("data") or []
            if isinstance(row, dict)
        ]
        metadata = SheetMetadata(
            document_type=document.get(":type") or DOCUMENT_TYPE,
            sheet_name=document.get(":sheetname") or DEFAULT_SHEET_NAME,
            column_widths=[int(w) for w in document.get(":colWidths") or []],
            column_keys=[str(k) for k in document.get(":columns") or []],
        )
        return cls(
            data=rows,
            metadata=metadata,
            total=int(document.get("total", len(rows))),
            limit=int(document.get("limit", len(rows))),
            offset=int(document.get("offset", 0)),
        )


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
