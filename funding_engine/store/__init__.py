"""In-memory relational store for the funding ledger."""

from funding_engine.store.ledger import LedgerStore

__all__ = ["LedgerStore"]
