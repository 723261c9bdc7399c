"""
Value transfer facility holding a campaign's pooled balance.

The ledger deposits every accepted contribution here and asks it to pay
out on fund claims and refunds. A transfer either moves the money and
returns, or raises PayoutFailed with the balance exactly as it was.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import structlog

from .errors import PayoutFailed

logger = structlog.get_logger()


class PayoutFacility(Protocol):
    """What the ledger needs from whoever actually holds the money."""

    @property
    def balance(self) -> int:
        ...

    def deposit(self, sender: str, amount: int) -> None:
        ...

    def transfer(self, recipient: str, amount: int) -> None:
        ...


@dataclass
class Payout:
    """A completed outbound transfer."""

    recipient: str
    amount: int


RecipientHook = Callable[[str, int], None]


class Vault:
    """
    In-memory pooled balance.

    Recipients listed in ``rejecting`` refuse every transfer, which is how
    tests model a payee whose receive hook reverts. ``recipient_hook`` runs
    after funds move; if it raises, the transfer is undone and reported as
    PayoutFailed.
    """

    def __init__(
        self,
        rejecting: Optional[set[str]] = None,
        recipient_hook: Optional[RecipientHook] = None,
    ):
        self._balance = 0
        self.rejecting: set[str] = set(rejecting or ())
        self.recipient_hook = recipient_hook
        self.deposited: dict[str, int] = defaultdict(int)
        self.credited: dict[str, int] = defaultdict(int)
        self.payouts: list[Payout] = []

    @property
    def balance(self) -> int:
        return self._balance

    @property
    def total_paid_out(self) -> int:
        return sum(p.amount for p in self.payouts)

    def deposit(self, sender: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError(f"Deposit must be positive, got {amount}")
        self._balance += amount
        self.deposited[sender] += amount

    def transfer(self, recipient: str, amount: int) -> None:
        if amount <= 0:
            raise PayoutFailed(recipient, amount, "amount must be positive")
        if recipient in self.rejecting:
            logger.warning("vault.transfer_rejected", recipient=recipient, amount=amount)
            raise PayoutFailed(recipient, amount, "recipient rejected transfer")
        if amount > self._balance:
            logger.warning(
                "vault.insufficient_balance",
                recipient=recipient,
                amount=amount,
                balance=self._balance,
            )
            raise PayoutFailed(recipient, amount, "insufficient balance")

        self._balance -= amount
        self.credited[recipient] += amount

        if self.recipient_hook is not None:
            try:
                self.recipient_hook(recipient, amount)
            except Exception as ex:
                self._balance += amount
                self.credited[recipient] -= amount
                logger.warning(
                    "vault.transfer_reverted",
                    recipient=recipient,
                    amount=amount,
                    error=str(ex),
                )
                raise PayoutFailed(recipient, amount, f"recipient hook raised: {ex}") from ex

        self.payouts.append(Payout(recipient=recipient, amount=amount))
        logger.info("vault.transfer_completed", recipient=recipient, amount=amount, balance=self._balance)
