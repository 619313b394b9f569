import sys
import time

import numpy as np
import psutil

from tablepyground import CategoricalColumn, NullableColumn, RawColumn

ROWS = 1_000_000
rng = np.random.default_rng(42)

try:
    encoding_type = sys.argv[1]
    value_type = sys.argv[2]
except IndexError:
    encoding_type = value_type = None

if value_type == "numbers":
    values = rng.integers(0, 10, ROWS).tolist()
elif value_type == "strings":
    values = [f"value {v}" for v in rng.integers(0, 10, ROWS).tolist()]
else:
    print("Values must be numbers or strings")
    sys.exit(1)

if encoding_type == "raw":
    column = RawColumn(values)
elif encoding_type == "nullable":
    column = NullableColumn(values)
elif encoding_type == "categorical":
    column = CategoricalColumn(values)
elif encoding_type == "nullable-categorical":
    column = CategoricalColumn(values, nullable=True)
else:
    print("Encoding must be raw, nullable, categorical or nullable-categorical")
    sys.exit(1)

proc = psutil.Process()
start = time.time()
distinct = set()
for value in column:
    distinct.add(value)
end = time.time()

print(
    "TIME:",
    round(end - start, 3),
    "MEMORY:",
    proc.memory_full_info().rss // (1024 * 1024),
)
