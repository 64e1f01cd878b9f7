"""Tests for the Table Materializer"""

import pytest

from acordao_drafter.utils.table_materializer import (
    is_separator_row, is_table_line, materialize, split_row,
)


class TestTableLines:

    @pytest.mark.parametrize("line", ["| a |", "  | a | b |  ", "||"])
    def test_table_lines(self, line):
        assert is_table_line(line)

    @pytest.mark.parametrize("line", ["| a", "a |", "a | b", ""])
    def test_not_table_lines(self, line):
        assert not is_table_line(line)


class TestSeparatorRows:

    @pytest.mark.parametrize("line", [
        "|---|---|", "|:--|--:|", "|:-:|", "| --- | :---: |", "   |---|   ",
    ])
    def test_separator_rows(self, line):
        assert is_separator_row(line)

    @pytest.mark.parametrize("line", ["| a | b |", "|-a-|", "| - x |", "||"])
    def test_data_rows(self, line):
        assert not is_separator_row(line)


class TestMaterialize:

    def test_cells_are_trimmed(self):
        assert split_row("|  Nome  |  Valor |") == ["Nome", "Valor"]

    def test_only_one_outer_pipe_is_stripped(self):
        assert split_row("|| a ||") == ["", "a", ""]

    def test_separators_dropped_and_order_kept(self):
        table = materialize(["| h1 | h2 |", "|----|----|", "| 1 | 2 |", "| 3 | 4 |"])
        assert table.rows == [["h1", "h2"], ["1", "2"], ["3", "4"]]

    def test_jagged_rows_are_not_padded(self):
        table = materialize(["| a | b | c |", "| 1 |", "| x | y |"])
        assert [len(r) for r in table.rows] == [3, 1, 2]

    def test_only_separators_gives_empty_table(self):
        assert materialize(["|---|", "|:-:|"]).rows == []
