"""JSON-file transaction log.

The whole log is read and written as one JSON array; there is no
incremental diffing. Records use the camelCase field names of the blob
format (``assetId``, ``pricePerUnitEUR``).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from pydantic import TypeAdapter

from folio_engine.domain.assets import DEFAULT_REGISTRY, AssetRegistry
from folio_engine.domain.models import Transaction
from folio_engine.schemas.portfolio import TransactionRecord

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(List[TransactionRecord])


class TransactionNotFound(KeyError):
    pass


class TransactionStore:
    def __init__(self, path: str | Path, registry: AssetRegistry = DEFAULT_REGISTRY) -> None:
        self.path = Path(path)
        self.registry = registry

    def _read(self) -> list[Transaction]:
        if not self.path.exists():
            return []
        raw = self.path.read_text(encoding="utf-8")
        if not raw.strip():
            return []
        return [record.to_domain() for record in _RECORDS.validate_json(raw)]

    def _write(self, transactions: list[Transaction]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [TransactionRecord.from_domain(tx).model_dump(by_alias=True) for tx in transactions]
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def load(self) -> list[Transaction]:
        """Read the log, rounding quantities to each asset's display precision.

        The file is rewritten only when the rounding changed a quantity.
        """

        transactions = self._read()
        normalized = [tx.with_precision(self.registry.precision_for(tx.asset_id)) for tx in transactions]
        if normalized != transactions:
            logger.info("Normalized quantity precision in %s", self.path)
            self._write(normalized)
        return normalized

    def add(self, tx: Transaction) -> list[Transaction]:
        transactions = self.load()
        transactions.append(tx)
        self._write(transactions)
        return transactions

    def delete(self, transaction_id: str) -> list[Transaction]:
        transactions = self.load()
        remaining = [tx for tx in transactions if tx.id != transaction_id]
        if len(remaining) == len(transactions):
            raise TransactionNotFound(transaction_id)
        self._write(remaining)
        return remaining


__all__ = ["TransactionStore", "TransactionNotFound"]
