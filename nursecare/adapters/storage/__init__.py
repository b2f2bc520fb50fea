"""Storage adapters for NurseCare.

This module contains storage adapters that implement the StoragePort interface
for persisting patients, todos and notifications.
"""

from nursecare.adapters.storage.duckdb_adapter import DuckDBAdapter

__all__ = ["DuckDBAdapter"]
