"""
Tests for the output module.

Tests the atomic script writer and the manual-review report.
"""

import json
import tempfile
from pathlib import Path

import pytest

from schemashift.models import Diagnostic, DiagnosticKind, Dialect
from schemashift.output import MYSQL_NO_BACKSLASH_ESCAPES, ScriptWriter
from schemashift.utils.review import ReviewReport


def leftovers(directory: Path):
    return [p.name for p in directory.iterdir() if p.name.endswith(".tmp")]


class TestScriptWriter:
    """Tests for ScriptWriter."""

    def test_write_text(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            writer = ScriptWriter(tmpdir)
            path = writer.write_text("schema.sql", "CREATE TABLE t (\n    x DATE\n);\n")

            assert path == Path(tmpdir) / "schema.sql"
            assert path.read_text(encoding="utf-8") == "CREATE TABLE t (\n    x DATE\n);\n"
            assert leftovers(Path(tmpdir)) == []

    def test_creates_directories(self, tmp_path):
        writer = ScriptWriter(tmp_path / "out" / "nested")
        path = writer.write_text("a.sql", "x")
        assert path.exists()

    def test_absolute_path_kept(self, tmp_path):
        writer = ScriptWriter(tmp_path / "ignored")
        target = tmp_path / "abs.sql"
        assert writer.write_text(target, "x") == target

    def test_write_lines(self, tmp_path):
        path, count = ScriptWriter(tmp_path).write_lines("tables.txt", ["a", "b"])
        assert count == 2
        assert path.read_text() == "a\nb\n"

    def test_utf8(self, tmp_path):
        path = ScriptWriter(tmp_path).write_text("u.sql", "INSERT INTO t VALUES ('Zoë ✓');\n")
        assert path.read_bytes().decode("utf-8") == "INSERT INTO t VALUES ('Zoë ✓');\n"

    def test_failure_leaves_destination_untouched(self, tmp_path):
        writer = ScriptWriter(tmp_path)
        writer.write_text("data.sql", "old\n")

        def statements():
            yield "INSERT INTO t VALUES (1);"
            raise RuntimeError("cursor died")

        with pytest.raises(RuntimeError):
            writer.write_statements("data.sql", statements(), Dialect.ORACLE)

        assert (tmp_path / "data.sql").read_text() == "old\n"
        assert leftovers(tmp_path) == []

    def test_failure_without_previous_file(self, tmp_path):
        writer = ScriptWriter(tmp_path)
        with pytest.raises(ValueError):
            with writer.open("new.sql") as handle:
                handle.write("partial")
                raise ValueError("boom")
        assert list(tmp_path.iterdir()) == []

    def test_mysql_preamble(self, tmp_path):
        writer = ScriptWriter(tmp_path)
        path, count = writer.write_statements("d.sql", ["INSERT INTO t VALUES (1);"], Dialect.MYSQL)
        assert count == 1
        assert path.read_text().splitlines() == [MYSQL_NO_BACKSLASH_ESCAPES, "INSERT INTO t VALUES (1);"]

    def test_preamble_disabled(self, tmp_path):
        writer = ScriptWriter(tmp_path, mysql_no_backslash_escapes=False)
        path, _ = writer.write_statements("d.sql", ["INSERT INTO t VALUES (1);"], Dialect.MYSQL)
        assert path.read_text() == "INSERT INTO t VALUES (1);\n"

    def test_no_preamble_for_oracle(self, tmp_path):
        assert ScriptWriter(tmp_path).preamble(Dialect.ORACLE) is None

    def test_progress_callback(self, tmp_path):
        seen = []
        ScriptWriter(tmp_path).write_statements("d.sql", ["a;", "b;"], Dialect.ORACLE, on_statement=seen.append)
        assert seen == [1, 2]


@pytest.fixture
def diagnostics():
    return [
        Diagnostic(DiagnosticKind.UNMAPPED_TYPE, "GEOMETRY", "no mapping", table="places", column="shape"),
        Diagnostic(DiagnosticKind.UNMAPPED_TYPE, "SET", "no mapping", table="places", column="tags"),
        Diagnostic(DiagnosticKind.AMBIGUOUS_NUMERIC, "NUMBER", "scale | no precision", table="rates", column="r"),
    ]


class TestReviewReport:
    """Tests for ReviewReport."""

    def test_summary(self, diagnostics):
        report = ReviewReport("convertdbschema", "MySQL", "Oracle")
        report.add(diagnostics)
        data = report.to_dict()

        assert len(report) == 3
        assert data["total_items"] == 3
        assert data["summary_by_kind"] == {"ambiguous_numeric": 1, "unmapped_type": 2}
        assert data["summary_by_table"] == {"places": 2, "rates": 1}
        assert data["items"][0]["suggested_action"]

    def test_empty_report_is_falsy(self):
        assert not ReviewReport()

    def test_save(self, tmp_path, diagnostics):
        report = ReviewReport("converttable", "Oracle", "MySQL")
        report.add(diagnostics)
        json_path, md_path = report.save(tmp_path)

        assert json_path == tmp_path / "review" / "manual_review.json"
        assert json.loads(json_path.read_text())["command"] == "converttable"
        markdown = md_path.read_text()
        assert "# Manual Review Required" in markdown
        assert "| places.shape | unmapped_type | GEOMETRY | no mapping |" in markdown
        assert "scale \\| no precision" in markdown
