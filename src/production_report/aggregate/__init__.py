"""Aggregation helpers.

This package indexes parsed records by workshop and month and rolls them up
into quarterly and annual per-workshop summaries.
"""
