"""Tests for the in-memory value transfer facility."""

import pytest

from crowdfund.errors import PayoutFailed
from crowdfund.vault import Payout, Vault


class TestVault:
    """Tests for Vault deposits and transfers."""

    def test_deposit_and_transfer(self):
        """Deposits pool up; transfers credit the recipient."""
        vault = Vault()
        vault.deposit("a", 3)
        vault.deposit("b", 2)
        vault.transfer("owner", 4)
        assert vault.balance == 1
        assert vault.credited["owner"] == 4
        assert vault.payouts == [Payout(recipient="owner", amount=4)]
        assert vault.total_paid_out == 4

    def test_insufficient_balance(self):
        """Balance can never go negative."""
        vault = Vault()
        vault.deposit("a", 1)
        with pytest.raises(PayoutFailed, match="insufficient balance"):
            vault.transfer("a", 2)
        assert vault.balance == 1
        assert vault.payouts == []

    def test_non_positive_transfer(self):
        """Zero transfers are rejected."""
        vault = Vault()
        vault.deposit("a", 1)
        with pytest.raises(PayoutFailed):
            vault.transfer("a", 0)

    def test_non_positive_deposit(self):
        """Zero deposits are a programming error."""
        with pytest.raises(ValueError):
            Vault().deposit("a", 0)

    def test_rejecting_recipient(self):
        """Listed recipients refuse transfers."""
        vault = Vault(rejecting={"contract"})
        vault.deposit("a", 5)
        with pytest.raises(PayoutFailed) as excinfo:
            vault.transfer("contract", 5)
        assert excinfo.value.recipient == "contract"
        assert excinfo.value.amount == 5
        assert vault.balance == 5

    def test_hook_failure_reverts(self):
        """A raising recipient hook undoes the transfer."""
        def hook(recipient, amount):
            raise RuntimeError("revert")

        vault = Vault(recipient_hook=hook)
        vault.deposit("a", 5)
        with pytest.raises(PayoutFailed, match="revert"):
            vault.transfer("b", 5)
        assert vault.balance == 5
        assert vault.credited["b"] == 0
        assert vault.payouts == []

    def test_hook_sees_completed_transfer(self):
        """Hook runs after the balance moved."""
        seen = []
        vault = Vault(recipient_hook=lambda r, a: seen.append((r, a, vault.balance)))
        vault.deposit("a", 5)
        vault.transfer("b", 2)
        assert seen == [("b", 2, 3)]
