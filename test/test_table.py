import numpy as np
import pyarrow as pa
import pyarrow.compute as pc
import pytest

from tablepyground.table import (
    CategoricalColumn,
    ColumnKind,
    NullableColumn,
    OutOfRange,
    RawColumn,
    SchemaMismatch,
    Table,
)


@pytest.fixture
def mock_table():
    """Create a table with one column for each encoding."""
    return Table.from_columns(
        {
            "city": CategoricalColumn(["Rome", "Milan", "Rome"]),
            "shops": RawColumn([10, 7, 3]),
            "revenue": NullableColumn([1.5, None, 2.5]),
        }
    )


def test_empty_table():
    """Test a table without columns."""
    table = Table()
    assert table.num_rows == 0
    assert table.num_columns == 0
    assert table.column_names == []
    assert len(table) == 0


def test_table_properties(mock_table):
    """Test the shape and schema of a table."""
    assert mock_table.num_rows == 3
    assert mock_table.num_columns == 3
    assert len(mock_table) == 3
    assert mock_table.column_names == ["city", "shops", "revenue"]
    assert "shops" in mock_table
    assert "employees" not in mock_table
    assert mock_table.schema == [
        ("city", ColumnKind("categorical", pa.string(), False)),
        ("shops", ColumnKind("raw", pa.int64(), False)),
        ("revenue", ColumnKind("nullable", pa.float64(), True)),
    ]


@pytest.mark.parametrize("position", [0, 1, 2])
def test_positional_and_named_access_match(mock_table, position):
    """Test accessing a column by position or name returns the same column."""
    name = mock_table.column_names[position]
    assert mock_table.get_column(position) is mock_table.get_column(name)
    assert mock_table[position] is mock_table[name]
    assert mock_table.column_index(name) == position


def test_negative_positions(mock_table):
    """Test negative positions count from the last column."""
    assert mock_table.get_column(-1) is mock_table.get_column("revenue")


@pytest.mark.parametrize("key", [3, -4, "employees", 1.5, None])
def test_out_of_range(mock_table, key):
    """Test looking up a column that doesn't exist."""
    with pytest.raises(OutOfRange):
        mock_table.get_column(key)
    with pytest.raises(LookupError):
        mock_table[key]


def test_from_columns_round_trip():
    """Test the buffers of the columns hold the data they were built from."""
    columns = {
        "a": np.arange(100, dtype="float64"),
        "b": np.arange(100, dtype="int32"),
        "c": np.array([str(v) for v in range(100)], dtype=object),
    }
    table = Table.from_columns(columns)
    for position, expected in enumerate(columns.values()):
        (values,) = table.get_column(position).buffers()
        np.testing.assert_array_equal(values, expected)
        assert values.dtype == expected.dtype


def test_from_columns_pairs():
    """Test building a table from (name, data) pairs keeps their order."""
    table = Table.from_columns([("b", [1]), ("a", [2])])
    assert table.column_names == ["b", "a"]


def test_from_columns_unequal_lengths():
    """Test columns of different lengths are rejected."""
    with pytest.raises(SchemaMismatch):
        Table.from_columns({"a": [1, 2], "b": [1]})


def test_from_columns_empty_with_types():
    """Test building empty columns by providing their type."""
    table = Table.from_columns(
        {"a": [], "b": [None, None], "c": [1.5]},
        types={"a": pa.int64(), "b": pa.string()},
    )
    assert table.schema == [
        ("a", ColumnKind("raw", pa.int64(), False)),
        ("b", ColumnKind("nullable", pa.string(), True)),
        ("c", ColumnKind("raw", pa.float64(), False)),
    ]


def test_from_columns_empty_without_types():
    """Test empty columns have no detectable type."""
    table = Table.from_columns({"a": []}, types={"a": pa.int64()})
    assert table.num_rows == 0
    assert table.schema == [("a", ColumnKind("raw", pa.int64(), False))]

    with pytest.raises(SchemaMismatch, match="provide its type"):
        Table.from_columns({"a": [], "b": []})
    with pytest.raises(SchemaMismatch, match="provide its type"):
        Table.from_columns({"a": [None]})


def test_from_columns_empty_then_append():
    """Test appending rows to a table built from empty columns."""
    table = Table.from_columns(
        {"a": [], "b": []}, types={"a": pa.int64(), "b": pa.string()}
    )
    table.append_row([1, "x"])
    assert table.to_pydict() == {"a": [1], "b": ["x"]}


def test_duplicated_names():
    """Test two columns can't have the same name."""
    with pytest.raises(SchemaMismatch):
        Table([("a", RawColumn([1])), ("a", RawColumn([2]))])


def test_init_requires_columns():
    """Test the constructor only accepts Column objects."""
    with pytest.raises(TypeError):
        Table({"a": [1, 2]})


def test_from_arrow():
    """Test the encoding of the columns follows the arrow data."""
    data = pa.table(
        {
            "animals": pc.dictionary_encode(
                pa.array(["Flamingo", "Horse", "Flamingo", None])
            ),
            "n_legs": pa.array([2, 4, None, 100]),
            "weight": pa.array([1.5, 500.0, 1.2, 0.1]),
        }
    )
    table = Table.from_arrow(data)
    assert table.schema == [
        ("animals", ColumnKind("categorical", pa.string(), True)),
        ("n_legs", ColumnKind("nullable", pa.int64(), True)),
        ("weight", ColumnKind("raw", pa.float64(), False)),
    ]
    assert table.to_arrow().to_pydict() == data.to_pydict()


def test_from_arrow_recordbatch():
    """Test building a table from a record batch."""
    batch = pa.record_batch({"a": [1, 2, 3]})
    assert Table.from_arrow(batch).to_pydict() == {"a": [1, 2, 3]}


def test_to_arrow(mock_table):
    """Test converting a table to arrow keeps the encodings."""
    data = mock_table.to_arrow()
    assert data.column_names == ["city", "shops", "revenue"]
    assert pa.types.is_dictionary(data.schema.field("city").type)
    assert data.column("revenue").null_count == 1


def test_row(mock_table):
    """Test reading a single row."""
    assert mock_table.row(1) == {"city": "Milan", "shops": 7, "revenue": None}
    assert mock_table.row(-1) == {"city": "Rome", "shops": 3, "revenue": 2.5}
    with pytest.raises(IndexError):
        mock_table.row(3)


def test_to_pydict(mock_table):
    """Test converting a table to a dictionary of lists."""
    assert mock_table.to_pydict() == {
        "city": ["Rome", "Milan", "Rome"],
        "shops": [10, 7, 3],
        "revenue": [1.5, None, 2.5],
    }


def test_copy_is_independent(mock_table):
    """Test appending to a copy leaves the original table untouched."""
    copied = mock_table.copy()
    assert copied.equals(mock_table)
    copied.append_row(["Rome", 1, None])
    assert copied.num_rows == 4
    assert mock_table.num_rows == 3
    assert not copied.equals(mock_table)


def test_equals(mock_table):
    """Test comparing tables."""
    other = Table.from_columns(
        {
            "city": CategoricalColumn(["Rome", "Milan", "Rome"]),
            "shops": [10, 7, 3],
            "revenue": [1.5, None, 2.5],
        }
    )
    assert mock_table.equals(other)
    assert not mock_table.equals(Table.from_columns({"city": ["Rome", "Milan", "Rome"]}))


def test_repr(mock_table):
    """Test the representation of a table."""
    assert repr(mock_table) == "Table(columns=['city', 'shops', 'revenue'], rows=3)"


def test_str(mock_table):
    """Test the text rendering of a table."""
    assert str(mock_table) == "\n".join(
        [
            "city  | shops | revenue",
            "----- | ----- | -------",
            "Rome  | 10    | 1.50",
            "Milan | 7     | null",
            "Rome  | 3     | 2.50",
        ]
    )
