from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TransferRequest:
    """A fee transfer intent.  The ledger layer executes it, not the store."""

    amount: int
    payer: str
    payee: str

    def to_payload(self) -> dict:
        return {"amount": self.amount, "payer": self.payer, "payee": self.payee}


@dataclass(frozen=True, slots=True)
class LedgerConfig:
    """Read-only snapshot of the global configuration."""

    next_id: int
    max_per_owner: int
    creation_fee: int
    admin_principal: str
