"""Tests for the sheet model, schema resolution and row reconciliation."""

import pytest

from sheetsync.sheet import (
    DEFAULT_SCHEMA,
    ReconcileStrategy,
    Sheet,
    SheetMetadata,
    build_reset_rows,
    build_template_row,
    clean,
    is_empty_row,
    merge,
    resolve_column_widths,
    resolve_columns,
)
from sheetsync.sheet.samples import build_log_row, build_sample_rows
from sheetsync.sheet.schema import detect_schema_drift


def make_row(timestamp: str, prompt: str) -> dict[str, str]:
    return {"Timestamp": timestamp, "Prompt": prompt, "Status": "Completed"}


BLANK = {"Timestamp": "", "Prompt": "", "Status": ""}


class TestSheetDocument:
    """Tests for the JSON wire form of a Sheet."""

    def test_from_document_defaults_metadata(self):
        """Test missing metadata falls back to defaults."""
        sheet = Sheet.from_document({"data": [make_row("t1", "a")]})

        assert sheet.metadata.document_type == "sheet"
        assert sheet.metadata.sheet_name == "data"
        assert sheet.metadata.column_widths == []
        assert sheet.metadata.column_keys == []
        assert sheet.total == 1

    def test_from_document_reads_prefixed_metadata(self):
        """Test colon-prefixed attributes are parsed."""
        document = {
            "total": 1,
            "limit": 1,
            "offset": 0,
            "data": [make_row("t1", "a")],
            ":type": "sheet",
            ":sheetname": "log",
            ":colWidths": [80, 120, 50],
            ":columns": ["Timestamp", "Prompt", "Status"],
        }

        sheet = Sheet.from_document(document)

        assert sheet.metadata.sheet_name == "log"
        assert sheet.metadata.column_widths == [80, 120, 50]
        assert sheet.metadata.column_keys == ["Timestamp", "Prompt", "Status"]

    def test_from_document_coerces_cells_to_strings(self):
        """Test non-string cell values become strings."""
        sheet = Sheet.from_document({"data": [{"Count": 3, "Note": None}]})

        assert sheet.data == [{"Count": "3", "Note": ""}]

    def test_to_document_counters_match_rows(self):
        """Test total and limit always equal the row count."""
        rows = [make_row("t1", "a"), make_row("t2", "b")]
        sheet = Sheet(data=rows, total=99, limit=7, offset=3)

        document = sheet.to_document()

        assert document["total"] == 2
        assert document["limit"] == 2
        assert document["offset"] == 0
        assert document[":type"] == "sheet"
        assert ":columns" not in document

    def test_build_includes_columns(self):
        """Test Sheet.build records columns and widths."""
        columns = ["Timestamp", "Prompt", "Status"]
        sheet = Sheet.build([make_row("t1", "a")], columns, [50, 50, 50], sheet_name="log")

        document = sheet.to_document()

        assert document[":columns"] == columns
        assert document[":colWidths"] == [50, 50, 50]
        assert document[":sheetname"] == "log"
        assert sheet.total == sheet.limit == 1


class TestSchemaResolver:
    """Tests for column and width resolution."""

    def test_first_row_is_authoritative(self):
        """Test existing rows win over metadata and defaults."""
        rows = [make_row("t1", "a")]
        metadata = SheetMetadata(column_keys=["Other", "Keys"])

        columns = resolve_columns(rows, metadata, ["Fallback"])

        assert columns == ["Timestamp", "Prompt", "Status"]

    def test_metadata_used_when_no_rows(self):
        """Test preserved column keys survive an empty sheet."""
        metadata = SheetMetadata(column_keys=["A", "B"])

        assert resolve_columns([], metadata, ["Fallback"]) == ["A", "B"]

    def test_default_schema_fallback(self):
        """Test the static schema is used as last resort."""
        assert resolve_columns([], SheetMetadata()) == DEFAULT_SCHEMA
        assert resolve_columns([], None, ["X"]) == ["X"]

    def test_default_schema_shape(self):
        """Test the built-in schema covers the log record."""
        assert len(DEFAULT_SCHEMA) == 13
        assert DEFAULT_SCHEMA[0] == "Timestamp"
        assert "GeneratedText" in DEFAULT_SCHEMA

    def test_returned_columns_are_copies(self):
        """Test callers can mutate results without touching inputs."""
        metadata = SheetMetadata(column_keys=["A"])
        columns = resolve_columns([], metadata)
        columns.append("B")

        assert metadata.column_keys == ["A"]

    def test_widths_preserved_when_lengths_match(self):
        """Test matching widths are kept."""
        assert resolve_column_widths(["A", "B"], [80, 120]) == [80, 120]

    def test_widths_reset_on_mismatch(self):
        """Test mismatched widths are replaced by defaults."""
        assert resolve_column_widths(["A", "B", "C"], [80, 120]) == [50, 50, 50]
        assert resolve_column_widths(["A"], None) == [50]
        assert resolve_column_widths(["A", "B"], [], default_width=30) == [30, 30]

    def test_schema_drift_detected(self):
        """Test a changed column count is reported."""
        metadata = SheetMetadata(column_keys=["A", "B"], column_widths=[50, 50])

        assert detect_schema_drift(["A", "B", "C"], metadata) is True
        assert detect_schema_drift(["A", "B"], metadata) is False

    def test_schema_drift_ignores_fresh_sheet(self):
        """Test no drift is reported without prior metadata."""
        assert detect_schema_drift(["A"], SheetMetadata()) is False
        assert detect_schema_drift(["A"], None) is False


class TestRowReconciler:
    """Tests for empty-row rules, cleaning and merging."""

    def test_is_empty_row(self):
        """Test whitespace-only rows count as empty."""
        assert is_empty_row({"A": "", "B": "   "}) is True
        assert is_empty_row({"A": "", "B": "x"}) is False
        assert is_empty_row({}) is True

    def test_clean_removes_blank_rows_in_order(self):
        """Test clean drops blank rows and keeps the order of the rest."""
        rows = [
            dict(BLANK),
            make_row("t1", "a"),
            {"Timestamp": " ", "Prompt": "", "Status": "\t"},
            make_row("t2", "b"),
            dict(BLANK),
            make_row("t3", "c"),
        ]

        cleaned = clean(rows)

        assert [r["Timestamp"] for r in cleaned] == ["t1", "t2", "t3"]
        assert not any(is_empty_row(r) for r in cleaned)

    def test_merge_appends_without_dedup(self):
        """Test merge keeps duplicates and order."""
        existing = [make_row("t1", "a"), make_row("t2", "b")]
        new = [make_row("t1", "a")]

        merged = merge(existing, new)

        assert len(merged) == 3
        assert merged == [existing[0], existing[1], new[0]]

    def test_merge_does_not_mutate_inputs(self):
        """Test merge returns a new list."""
        existing = [make_row("t1", "a")]
        merge(existing, [make_row("t2", "b")])

        assert len(existing) == 1

    def test_build_template_row(self):
        """Test the template row is blank for every column."""
        row = build_template_row(["A", "B"])

        assert row == {"A": "", "B": ""}
        assert list(row) == ["A", "B"]

    def test_build_reset_rows(self):
        """Test reset rows depend on whether data existed."""
        assert build_reset_rows(["A", "B"], had_data=True) == [{"A": "", "B": ""}]
        assert build_reset_rows(["A", "B"], had_data=False) == []


class TestReconcileStrategy:
    """Tests for the header-row strategies."""

    def test_from_name(self):
        """Test strategy lookup by config name."""
        assert ReconcileStrategy.from_name("metadata-only") is ReconcileStrategy.METADATA_ONLY
        assert (
            ReconcileStrategy.from_name("LEGACY_HEADER_PRESERVING")
            is ReconcileStrategy.LEGACY_HEADER_PRESERVING
        )

    def test_from_name_unknown(self):
        """Test unknown names raise ValueError."""
        with pytest.raises(ValueError, match="Unknown reconcile strategy"):
            ReconcileStrategy.from_name("newest")

    def test_from_name_not_a_string(self):
        """Test a null or numeric strategy raises ValueError."""
        with pytest.raises(ValueError, match="must be a string"):
            ReconcileStrategy.from_name(None)
        with pytest.raises(ValueError, match="must be a string"):
            ReconcileStrategy.from_name(3)

    def test_metadata_only_drops_leading_blank(self):
        """Test a leading blank row is not treated as a header."""
        rows = [dict(BLANK), make_row("t1", "a")]

        header, data = ReconcileStrategy.METADATA_ONLY.split(rows)

        assert header is None
        assert data == [make_row("t1", "a")]

    def test_legacy_keeps_leading_blank(self):
        """Test the legacy strategy keeps the first blank row as header."""
        rows = [dict(BLANK), make_row("t1", "a"), dict(BLANK), make_row("t2", "b")]
        strategy = ReconcileStrategy.LEGACY_HEADER_PRESERVING

        header, data = strategy.split(rows)
        assembled = strategy.assemble(header, data)

        assert header == BLANK
        assert [r["Timestamp"] for r in data] == ["t1", "t2"]
        assert assembled[0] == BLANK
        assert len(assembled) == 3

    def test_legacy_without_header(self):
        """Test a non-blank first row is data under the legacy strategy."""
        rows = [make_row("t1", "a"), dict(BLANK)]

        header, data = ReconcileStrategy.LEGACY_HEADER_PRESERVING.split(rows)

        assert header is None
        assert data == [make_row("t1", "a")]

    def test_initial_rows(self):
        """Test only the legacy strategy writes a header on init."""
        rows = [make_row("t1", "a")]
        columns = list(rows[0])

        assert ReconcileStrategy.METADATA_ONLY.initial_rows(columns, rows) == rows
        legacy = ReconcileStrategy.LEGACY_HEADER_PRESERVING.initial_rows(columns, rows)
        assert legacy == [BLANK, rows[0]]

    def test_reset_rows_reuse_legacy_header(self):
        """Test the legacy header is written back verbatim on reset."""
        header = {"Status": "", "Timestamp": "", "Prompt": ""}
        columns = ["Timestamp", "Prompt", "Status"]

        rows = ReconcileStrategy.LEGACY_HEADER_PRESERVING.reset_rows(columns, True, header)

        assert rows == [header]
        assert list(rows[0]) == ["Status", "Timestamp", "Prompt"]


class TestSamples:
    """Tests for built-in rows."""

    def test_sample_rows_match_default_schema(self):
        """Test sample rows use exactly the default columns."""
        rows = build_sample_rows("https://p.example", "https://l.example")

        assert len(rows) == 2
        for row in rows:
            assert list(row) == DEFAULT_SCHEMA
        assert rows[0]["AEMPreviewURL"] == "https://p.example/sample1"
        assert rows[1]["EDSURL"] == "https://l.example/sample2"

    def test_log_row(self):
        """Test a generated log row is stamped and complete."""
        row = build_log_row("a prompt", "https://p.example", "https://l.example")

        assert list(row) == DEFAULT_SCHEMA
        assert row["Prompt"] == "a prompt"
        assert row["Timestamp"].endswith("Z")
        assert row["Source"] == "sheetsync-cli"
