"""Cursor signing and paging benchmarks (pytest-benchmark).

    pytest tests/benchmarks/ --benchmark-sort=median
    pytest tests/benchmarks/ --benchmark-disable   # functional run only
"""
