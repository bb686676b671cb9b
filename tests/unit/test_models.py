"""Unit Tests for the shared models."""

import pytest

from dbxml.exceptions import ConfigurationError
from dbxml.models import ExportResult, ImportResult, InsertOutcome, InsertResult, ReplaceStrategy


class TestReplaceStrategy:

    @pytest.mark.parametrize("name, expected", [
        ("replace_all", ReplaceStrategy.REPLACE_ALL),
        ("REPLACE_EXISTING", ReplaceStrategy.REPLACE_EXISTING),
        (" replace-none ", ReplaceStrategy.REPLACE_NONE),
        (ReplaceStrategy.REPLACE_NONE, ReplaceStrategy.REPLACE_NONE),
    ])
    def test_from_name(self, name, expected):
        assert ReplaceStrategy.from_name(name) is expected

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError, match="Unknown replace strategy"):
            ReplaceStrategy.from_name("merge")


class TestResults:

    def test_insert_result_constructors(self):
        error = Exception("dup")
        assert InsertResult.ok(3).inserted
        assert InsertResult.ok(3).row_id == 3
        assert InsertResult.conflict(error).outcome is InsertOutcome.CONFLICT
        assert InsertResult.failed(error).error is error
        assert not InsertResult.failed(error).inserted

    def test_import_result_summary(self):
        result = ImportResult(tables_processed=["notes"], rows_inserted=2, rows_replaced=1)
        assert result.rows_committed == 3
        assert result.summary()["tables_processed"] == 1

    def test_export_result_totals(self):
        result = ExportResult(rows_per_table={"notes": 3, "tags": 2})
        assert result.tables_exported == 2
        assert result.rows_exported == 5
