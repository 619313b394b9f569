import sys
import time

import numpy as np
import psutil

from tablepyground import Table, kernels

rng = np.random.default_rng(42)
table = Table.from_columns({f"col{idx}": rng.random(1_000_000) for idx in range(10)})

try:
    access_type = sys.argv[1]
except IndexError:
    access_type = None


def positional():
    for _ in range(1_000_000):
        table.get_column(7)


def named():
    for _ in range(1_000_000):
        table.get_column("col7")


def loop():
    # Every value goes through the table and the column.
    total = 0.0
    for idx in range(table.num_rows):
        total += table.get_column("col7")[idx]
    return total


def barrier():
    return kernels.with_columns(table, kernels.sum_values, "col7")


if access_type == "positional":
    run = positional
elif access_type == "named":
    run = named
elif access_type == "loop":
    run = loop
elif access_type == "barrier":
    run = barrier
else:
    print("Access must be positional, named, loop or barrier")
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
