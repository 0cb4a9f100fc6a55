from .transactions import TransactionNotFound, TransactionStore

__all__ = ["TransactionNotFound", "TransactionStore"]
