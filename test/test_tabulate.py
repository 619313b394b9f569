import pyarrow as pa
import pytest

from tablepyground.table import RawColumn, Table
from tablepyground.utils.tabulate import format_value, tabulate


def test_tabulate_truncates_rows():
    """Test only the first rows are rendered."""
    table = Table.from_columns({"n": list(range(25))})
    text = tabulate(table, max_rows=3)
    assert text == "\n".join(["n", "-", "0", "1", "2", "... and 22 more rows"])


def test_tabulate_empty_table():
    """Test rendering a table without rows."""
    table = Table([("name", RawColumn([], type=pa.string()))])
    assert tabulate(table) == "name\n----"


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "null"),
        (1.0, "1.00"),
        (2.456, "2.46"),
        (True, "true"),
        (False, "false"),
        (7, "7"),
        ("short", "short"),
        ("x" * 40, "x" * 27 + "..."),
    ],
)
def test_format_value(value, expected):
    """Test the text representation of a single value."""
    assert format_value(value) == expected
