"""Shell commands exposing TablePyground functionalities.

This module contains the shell commands that can be used to interact with TablePyground.

TableInfo
=========

``pyground-tableinfo`` loads a CSV or Parquet file into a table and
prints the kind of each column followed by the first rows::

    pyground-tableinfo data/sales.csv --categorical Product --rows 5

Columns listed with ``--categorical`` are stored as categorical columns,
which is convenient for columns that repeat a small set of values.
"""
