"""Tests for migration script splitting."""

import pytest

from appforge.pipeline import split_statements


class TestSplitStatements:
    def test_statements_keep_source_order(self):
        script = """
        CREATE TABLE a (id TEXT PRIMARY KEY);
        CREATE TABLE b (id TEXT PRIMARY KEY);
        CREATE INDEX idx_b ON b (id);
        """

        statements = split_statements(script)

        assert statements == [
            "CREATE TABLE a (id TEXT PRIMARY KEY);",
            "CREATE TABLE b (id TEXT PRIMARY KEY);",
            "CREATE INDEX idx_b ON b (id);",
        ]

    def test_blank_statements_are_dropped(self):
        assert split_statements("CREATE TABLE a (x INT);;  ;\n;") == ["CREATE TABLE a (x INT);"]

    def test_script_without_terminator_is_one_statement(self):
        assert split_statements("CREATE TABLE a (x INT)") == ["CREATE TABLE a (x INT);"]

    def test_only_terminators_is_sent_whole(self):
        assert split_statements(" ; ;\n ; ") == ["; ;\n ;"]

    @pytest.mark.parametrize(
        ("script", "expected"),
        [
            ("-- nothing to migrate yet", "-- nothing to migrate yet;"),
            ("/* later */", "/* later */;"),
            ("  -- done;\n", "-- done;"),
        ],
    )
    def test_comment_only_script_is_sent_whole(self, script, expected):
        assert split_statements(script) == [expected]

    def test_whitespace_only_script_yields_nothing(self):
        assert split_statements(" \n\t ") == []

    def test_empty_script_yields_nothing(self):
        assert split_statements("") == []

    def test_terminator_inside_string_literal_does_not_split(self):
        script = "INSERT INTO notes (body) VALUES ('a; b');\nINSERT INTO notes (body) VALUES ('c');"

        assert split_statements(script) == [
            "INSERT INTO notes (body) VALUES ('a; b');",
            "INSERT INTO notes (body) VALUES ('c');",
        ]

    def test_terminator_inside_quoted_identifier_does_not_split(self):
        assert split_statements('CREATE TABLE "odd;name" (x INT);') == [
            'CREATE TABLE "odd;name" (x INT);'
        ]

    def test_comment_only_chunks_are_dropped(self):
        script = """
        -- initial schema
        CREATE TABLE a (x INT);
        /* nothing else yet; maybe later */
        """

        statements = split_statements(script)

        assert len(statements) == 1
        assert statements[0].endswith("CREATE TABLE a (x INT);")

    def test_terminator_inside_line_comment_does_not_split(self):
        script = "CREATE TABLE a (x INT); -- trailing; comment\nCREATE TABLE b (y INT);"

        statements = split_statements(script)

        assert len(statements) == 2
        assert statements[1].endswith("CREATE TABLE b (y INT);")
