import sys
import time

import numpy as np
import psutil

from tablepyground import Table, concat_tables

ROWS = 1_000_000
rng = np.random.default_rng(42)
a = rng.random(ROWS)
b = rng.integers(0, 100, ROWS)

try:
    append_type = sys.argv[1]
except IndexError:
    append_type = None

if append_type in ("row", "rows", "concat"):
    table = Table.from_columns({"a": a, "b": b})
    one_row = Table.from_columns({"a": a[:1], "b": b[:1]})


def append_row():
    for _ in range(1000):
        table.append_row([0.5, 1])


def append_rows():
    for _ in range(1000):
        table.append_rows(one_row)


def concat():
    result = table
    for _ in range(100):
        result = concat_tables(result, one_row)


def incremental():
    # Cell by cell through the table.
    table = Table.from_columns({"a": a[:1], "b": b[:1]})
    for idx in range(1, ROWS):
        table.append_row([a[idx], b[idx]])


def delayed():
    # Prepare the data first, then build the table at once.
    columns = {"a": np.empty(ROWS), "b": np.empty(ROWS, dtype=np.int64)}
    for idx in range(ROWS):
        columns["a"][idx] = a[idx]
        columns["b"][idx] = b[idx]
    Table.from_columns(columns)


if append_type == "row":
    run = append_row
elif append_type == "rows":
    run = append_rows
elif append_type == "concat":
    run = concat
elif append_type == "incremental":
    run = incremental
elif append_type == "delayed":
    run = delayed
else:
    print("Append must be row, rows, concat, incremental or delayed")
    sys.exit(1)

proc = psutil.Process()
start = time.time()
run()
end = time.time()

print(
    "TIME:",
    round(end - start, 3),
    "MEMORY:",
    proc.memory_full_info().rss // (1024 * 1024),
)
