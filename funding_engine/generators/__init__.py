"""Sample ledger generators."""

from funding_engine.generators.ledger import LedgerGenerator

__all__ = ["LedgerGenerator"]
