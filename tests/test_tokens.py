"""Tests for the in-memory token ledger."""

import pytest

from stakedrewards.exceptions import InvalidAmountError, TokenTransferError
from stakedrewards.tokens import InMemoryToken, TokenLedger


@pytest.fixture
def token() -> InMemoryToken:
    return InMemoryToken("token:test", symbol="TST", initial_holder="alice", initial_supply=1_000)


class TestInMemoryToken:
    def test_is_token_ledger(self, token):
        assert isinstance(token, TokenLedger)
        assert token.address == "token:test"
        assert token.decimals == 18
        assert "token:test" in repr(token)

    def test_initial_supply(self, token):
        assert token.balance_of("alice") == 1_000
        assert token.total_supply == 1_000
        assert token.balance_of("bob") == 0

    def test_mint(self, token):
        token.mint("bob", 50)
        assert token.balance_of("bob") == 50
        assert token.total_supply == 1_050

    @pytest.mark.parametrize("amount", [0, -5])
    def test_mint_non_positive(self, token, amount):
        with pytest.raises(InvalidAmountError):
            token.mint("bob", amount)

    def test_transfer(self, token):
        assert token.transfer("alice", "bob", 300) is True
        assert token.balance_of("alice") == 700
        assert token.balance_of("bob") == 300

    def test_transfer_exceeds_balance(self, token):
        with pytest.raises(TokenTransferError, match="exceeds balance"):
            token.transfer("alice", "bob", 1_001)
        assert token.balance_of("alice") == 1_000

    def test_transfer_from_uses_allowance(self, token):
        token.approve("alice", "pool", 400)
        assert token.transfer_from("pool", "alice", "pool", 250) is True
        assert token.balance_of("pool") == 250
        assert token.allowance("alice", "pool") == 150

    def test_transfer_from_exceeds_allowance(self, token):
        token.approve("alice", "pool", 100)
        with pytest.raises(TokenTransferError, match="exceeds allowance"):
            token.transfer_from("pool", "alice", "pool", 101)
        assert token.allowance("alice", "pool") == 100

    def test_negative_allowance(self, token):
        with pytest.raises(InvalidAmountError):
            token.approve("alice", "pool", -1)
