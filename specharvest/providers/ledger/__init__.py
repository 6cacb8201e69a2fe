"""Ledger persistence backends."""

from specharvest.providers.ledger.json_ledger_store import JsonLedgerStore

__all__ = ["JsonLedgerStore"]
