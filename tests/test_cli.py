"""
Tests for the command-line interface.

Commands run against offline YAML catalogs through click's CliRunner.
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from schemashift.cli import cli
from schemashift.output import MYSQL_NO_BACKSLASH_ESCAPES

MYSQL_CATALOG = """\
dialect: mysql
schema: shop
tables:
  users:
    columns:
      - {name: id, type: INT, nullable: false}
      - {name: name, type: VARCHAR(50)}
    rows:
      - [1, "O'Brien"]
      - [2, null]
  places:
    columns:
      - {name: id, type: INT, nullable: false}
      - {name: shape, type: GEOMETRY}
"""

ORACLE_CATALOG = """\
dialect: oracle
tables:
  ACCOUNTS:
    columns:
      - {name: ID, type: NUMBER, precision: 10, scale: 0, nullable: false}
      - {name: OPENED, type: DATE}
    rows:
      - [7, 2021-03-04]
"""

BINARY_CATALOG = """\
dialect: mysql
tables:
  files:
    columns:
      - {name: id, type: INT}
      - {name: data, type: BLOB}
    rows:
      - [1, !!binary "AAE="]
"""


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run every command inside an empty directory."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "mysql.yaml").write_text(MYSQL_CATALOG)
    (tmp_path / "oracle.yaml").write_text(ORACLE_CATALOG)
    (tmp_path / "binary.yaml").write_text(BINARY_CATALOG)
    return tmp_path


@pytest.fixture
def runner():
    return CliRunner()


class TestExportCommands:
    """Tests for tablelist, dbschema, tableschema and tabledata."""

    def test_tablelist(self, runner, workdir):
        result = runner.invoke(cli, ["tablelist", "--catalog_file", "mysql.yaml", "--case", "upper"])
        assert result.exit_code == 0, result.output
        assert (workdir / "tables.txt").read_text() == "USERS\nPLACES\n"

    def test_dbschema(self, runner, workdir):
        result = runner.invoke(cli, ["dbschema", "--catalog_file", "mysql.yaml"])
        assert result.exit_code == 0, result.output
        text = (workdir / "dbschema.sql").read_text()
        assert text.startswith("-- Schema for table users\nCREATE TABLE users (\n    id INT NOT NULL,\n")

    def test_tableschema_default_file(self, runner, workdir):
        result = runner.invoke(cli, ["tableschema", "--catalog_file", "oracle.yaml", "--tablename", "ACCOUNTS"])
        assert result.exit_code == 0, result.output
        text = (workdir / "table_schema_oracle.sql").read_text()
        assert "    ID NUMBER(10) NOT NULL," in text

    def test_tabledata(self, runner, workdir):
        result = runner.invoke(cli, ["tabledata", "--catalog_file", "mysql.yaml", "--tablename", "users"])
        assert result.exit_code == 0, result.output
        assert (workdir / "users_data.sql").read_text().splitlines() == [
            MYSQL_NO_BACKSLASH_ESCAPES,
            "INSERT INTO users (id, name) VALUES (1, 'O''Brien');",
            "INSERT INTO users (id, name) VALUES (2, NULL);",
        ]

    def test_custom_file(self, runner, workdir):
        result = runner.invoke(cli, ["tablelist", "--catalog_file", "mysql.yaml", "--file", "out/list.txt"])
        assert result.exit_code == 0, result.output
        assert (workdir / "out" / "list.txt").exists()


class TestConvertCommands:
    """Tests for convertdbschema, converttable and convertdata."""

    def test_convertdbschema_with_review(self, runner, workdir):
        result = runner.invoke(cli, ["convertdbschema", "--catalog_file", "mysql.yaml"])
        assert result.exit_code == 0, result.output

        text = (workdir / "converted_schema.sql").read_text()
        assert text.startswith("-- Converted database schema from MySQL to Oracle\n")
        assert "    shape GEOMETRY\n" in text

        review = json.loads((workdir / "review" / "manual_review.json").read_text())
        assert review["summary_by_kind"] == {"unmapped_type": 1}
        assert review["items"][0]["column"] == "shape"
        assert "Needs Manual Review" in result.output

    def test_review_disabled(self, runner, workdir):
        (workdir / "settings.yaml").write_text("review:\n  enabled: false\n")
        result = runner.invoke(cli, ["--config", "settings.yaml", "convertdbschema", "--catalog_file", "mysql.yaml"])
        assert result.exit_code == 0, result.output
        assert not (workdir / "review").exists()

    def test_converttable(self, runner, workdir):
        result = runner.invoke(cli, ["converttable", "--catalog_file", "mysql.yaml", "--tablename", "users"])
        assert result.exit_code == 0, result.output
        assert (workdir / "converted_users.sql").read_text() == (
            "CREATE TABLE users (\n"
            "    id NUMBER(10) NOT NULL,\n"
            "    name VARCHAR2(50)\n"
            ");\n"
        )

    def test_converttable_with_overrides(self, runner, workdir):
        (workdir / "schemashift.yaml").write_text(
            "type_overrides:\n"
            "  mysql_to_oracle:\n"
            "    VARCHAR: \"VARCHAR2({length} CHAR)\"\n"
        )
        result = runner.invoke(cli, ["converttable", "--catalog_file", "mysql.yaml", "--tablename", "users"])
        assert result.exit_code == 0, result.output
        assert "name VARCHAR2(50 CHAR)" in (workdir / "converted_users.sql").read_text()

    def test_convertdata_to_oracle(self, runner, workdir):
        result = runner.invoke(cli, ["convertdata", "--catalog_file", "mysql.yaml", "--tablename", "users"])
        assert result.exit_code == 0, result.output
        assert (workdir / "converted_users_data.sql").read_text() == (
            "INSERT INTO users VALUES (1, 'O''Brien');\n"
            "INSERT INTO users VALUES (2, NULL);\n"
        )

    def test_convertdata_to_mysql(self, runner, workdir):
        result = runner.invoke(cli, ["convertdata", "--catalog_file", "oracle.yaml", "--tablename", "ACCOUNTS"])
        assert result.exit_code == 0, result.output
        assert (workdir / "converted_ACCOUNTS_data.sql").read_text().splitlines() == [
            MYSQL_NO_BACKSLASH_ESCAPES,
            "INSERT INTO ACCOUNTS VALUES (7, '2021-03-04');",
        ]


class TestErrors:
    """Tests for error reporting."""

    def test_missing_table(self, runner, workdir):
        result = runner.invoke(cli, ["converttable", "--catalog_file", "mysql.yaml", "--tablename", "ghost"])
        assert result.exit_code == 1
        assert "ghost" in result.output
        assert not (workdir / "converted_ghost.sql").exists()

    def test_encoding_failure_leaves_no_file(self, runner, workdir):
        result = runner.invoke(cli, ["convertdata", "--catalog_file", "binary.yaml", "--tablename", "files"])
        assert result.exit_code == 1
        assert "data" in result.output
        assert sorted(p.name for p in workdir.iterdir()) == ["binary.yaml", "mysql.yaml", "oracle.yaml"]

    def test_source_required(self, runner, workdir):
        result = runner.invoke(cli, ["tablelist"])
        assert result.exit_code == 2
        assert "exactly one of" in result.output

    def test_dbtype_required_with_conn(self, runner, workdir):
        result = runner.invoke(cli, ["tablelist", "--conn", "a/b@h/d"])
        assert result.exit_code == 2

    def test_unknown_profile(self, runner, workdir):
        result = runner.invoke(cli, ["tablelist", "--profile", "prod"])
        assert result.exit_code == 1
        assert "Unknown connection profile" in result.output

    def test_bad_config(self, runner, workdir):
        (workdir / "bad.yaml").write_text("connections: [1, 2]\n")
        result = runner.invoke(cli, ["--config", "bad.yaml", "tablelist", "--catalog_file", "mysql.yaml"])
        assert result.exit_code == 1

    def test_profile_opens_live_catalog(self, runner, workdir, monkeypatch):
        monkeypatch.setenv("SHOP_PWD", "pw")
        (workdir / "schemashift.yaml").write_text(
            "connections:\n"
            "  shop:\n"
            "    dialect: mysql\n"
            "    dsn: app/${SHOP_PWD}@db:3306/shop\n"
        )
        with patch("mysql.connector.connect") as connect:
            cursor = connect.return_value.cursor.return_value
            cursor.fetchall.return_value = [("users",)]
            result = runner.invoke(cli, ["tablelist", "--profile", "shop"])

        assert result.exit_code == 0, result.output
        assert connect.call_args.kwargs["password"] == "pw"
        assert (workdir / "tables.txt").read_text() == "users\n"
