"""JSON transaction log tests."""

from __future__ import annotations

import json

import pytest

from folio_engine.domain.models import Transaction
from folio_engine.storage.transactions import TransactionNotFound, TransactionStore


def _write(path, records) -> None:
    path.write_text(json.dumps(records), encoding="utf-8")


def test_missing_or_empty_file_loads_empty(tmp_path):
    store = TransactionStore(tmp_path / "missing.json")
    assert store.load() == []

    empty = tmp_path / "empty.json"
    empty.write_text("  \n", encoding="utf-8")
    assert TransactionStore(empty).load() == []


def test_load_normalizes_precision_and_rewrites(tmp_path):
    path = tmp_path / "transactions.json"
    _write(
        path,
        [
            {"id": "a", "assetId": "etf:invesco-ftse-all-world", "timestamp": 1, "quantity": 1.23456, "pricePerUnitEUR": 90.0},
            {"id": "b", "assetId": "unknown", "timestamp": 2, "quantity": 0.123456, "pricePerUnitEUR": 1.0},
        ],
    )

    transactions = TransactionStore(path).load()

    assert [tx.quantity for tx in transactions] == [1.23, 0.1235]
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored[0]["quantity"] == 1.23
    assert stored[1]["pricePerUnitEUR"] == 1.0


def test_load_leaves_normalized_file_untouched(tmp_path):
    path = tmp_path / "transactions.json"
    raw = json.dumps([{"id": "a", "assetId": "btc", "timestamp": 1, "quantity": 0.0125, "pricePerUnitEUR": 50000.0}])
    path.write_text(raw, encoding="utf-8")

    TransactionStore(path).load()

    assert path.read_text(encoding="utf-8") == raw


def test_add_and_delete(tmp_path):
    store = TransactionStore(tmp_path / "nested" / "transactions.json")
    store.add(Transaction(id="a", asset_id="btc", timestamp=1, quantity=0.5, price_per_unit_eur=40000.0))
    store.add(Transaction(id="b", asset_id="btc", timestamp=2, quantity=0.25, price_per_unit_eur=42000.0))

    assert [tx.id for tx in store.load()] == ["a", "b"]

    remaining = store.delete("a")
    assert [tx.id for tx in remaining] == ["b"]
    assert [tx.id for tx in store.load()] == ["b"]

    with pytest.raises(TransactionNotFound):
        store.delete("a")


def test_precision_rounds_halves_up(tmp_path):
    tx = Transaction(id="a", asset_id="etf:invesco-ftse-all-world", timestamp=1, quantity=0.125, price_per_unit_eur=90.0)
    assert tx.with_precision(2).quantity == 0.13
    assert tx.with_precision(4).quantity == 0.125

    path = tmp_path / "transactions.json"
    _write(path, [{"id": "a", "assetId": "etf:invesco-ftse-all-world", "timestamp": 1, "quantity": 2.5, "pricePerUnitEUR": 90.0}])
    store = TransactionStore(path)
    assert store.load()[0].quantity == 2.5

    _write(path, [{"id": "b", "assetId": "etf:invesco-ftse-all-world", "timestamp": 1, "quantity": 0.625, "pricePerUnitEUR": 90.0}])
    assert store.load()[0].quantity == 0.63
