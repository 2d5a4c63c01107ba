"""Opportunity store contract and the SQLite implementation."""

from .base import OpportunityStore
from .sqlite_store import SQLiteOpportunityStore

__all__ = ["OpportunityStore", "SQLiteOpportunityStore"]
