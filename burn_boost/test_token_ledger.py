"""
Test mint records and holder token accounts.
"""
import pytest
import tempfile
import shutil
from burn_boost.db import DB
from burn_boost.errors import InsufficientBalance, Unauthorized, AccountNotFound, MintSupplyMismatch
from burn_boost.store import StateStore, mint_key
from burn_boost.token_ledger import TokenLedger

TOKEN = b'\x10' * 20
AUTHORITY = b'\x11' * 20
ALICE = b'\x12' * 20
BOB = b'\x13' * 20


@pytest.fixture
def env():
    temp_dir = tempfile.mkdtemp()
    db = DB(temp_dir)
    store = StateStore(db)
    ledger = TokenLedger()
    with store.transaction(b'setup') as txn:
        ledger.create_mint(txn, TOKEN, AUTHORITY, 9)
        ledger.mint_to(txn, TOKEN, ALICE, 1_000, authority=AUTHORITY)
    yield store, ledger
    db.close()
    shutil.rmtree(temp_dir)


def balance(store, ledger, owner):
    with store.transaction(b'read') as txn:
        return ledger.balance_of(txn, TOKEN, owner)


class TestMint:
    def test_mint_credits_account_and_supply(self, env):
        store, ledger = env
        assert balance(store, ledger, ALICE) == 1_000
        assert store.read(mint_key(TOKEN))['supply'] == 1_000

    def test_mint_requires_authority(self, env):
        store, ledger = env
        with pytest.raises(Unauthorized):
            with store.transaction(b'op') as txn:
                ledger.mint_to(txn, TOKEN, BOB, 5, authority=BOB)
        assert balance(store, ledger, BOB) == 0

    def test_unknown_mint(self, env):
        store, ledger = env
        with pytest.raises(AccountNotFound):
            with store.transaction(b'op') as txn:
                ledger.get_mint(txn, b'\x99' * 20)


class TestBurnFrom:
    def test_burn_reduces_balance_and_supply(self, env):
        store, ledger = env
        with store.transaction(b'op') as txn:
            ledger.burn_from(txn, TOKEN, ledger.associated_account(TOKEN, ALICE), ALICE, 400)
        assert balance(store, ledger, ALICE) == 600
        assert store.read(mint_key(TOKEN))['supply'] == 600

    def test_burn_more_than_balance(self, env):
        store, ledger = env
        with pytest.raises(InsufficientBalance) as ctx:
            with store.transaction(b'op') as txn:
                ledger.burn_from(txn, TOKEN, ledger.associated_account(TOKEN, ALICE), ALICE, 1_001)
        assert ctx.value.requested == 1_001
        assert ctx.value.balance == 1_000
        assert balance(store, ledger, ALICE) == 1_000

    def test_burn_from_missing_account(self, env):
        store, ledger = env
        with pytest.raises(InsufficientBalance):
            with store.transaction(b'op') as txn:
                ledger.burn_from(txn, TOKEN, ledger.associated_account(TOKEN, BOB), BOB, 1)

    def test_burn_from_someone_elses_account(self, env):
        store, ledger = env
        with pytest.raises(Unauthorized):
            with store.transaction(b'op') as txn:
                ledger.burn_from(txn, TOKEN, ledger.associated_account(TOKEN, ALICE), BOB, 1)
        assert balance(store, ledger, ALICE) == 1_000


class TestTransfer:
    def test_transfer(self, env):
        store, ledger = env
        with store.transaction(b'op') as txn:
            ledger.transfer(txn, TOKEN, ALICE, BOB, 250)
        assert balance(store, ledger, ALICE) == 750
        assert balance(store, ledger, BOB) == 250
        assert store.read(mint_key(TOKEN))['supply'] == 1_000

    def test_transfer_insufficient(self, env):
        store, ledger = env
        with pytest.raises(InsufficientBalance):
            with store.transaction(b'op') as txn:
                ledger.transfer(txn, TOKEN, BOB, ALICE, 1)

    def test_transfer_to_self_is_noop(self, env):
        store, ledger = env
        with store.transaction(b'op') as txn:
            ledger.transfer(txn, TOKEN, ALICE, ALICE, 100)
        assert balance(store, ledger, ALICE) == 1_000


class TestMintConsistency:
    def test_burn_beyond_mint_supply_is_a_ledger_error(self, env):
        store, ledger = env
        with store.transaction(b'corrupt') as txn:
            mint = ledger.get_mint(txn, TOKEN)
            mint['supply'] = 10
            txn.set(mint_key(TOKEN), mint)

        with pytest.raises(MintSupplyMismatch):
            with store.transaction(b'op') as txn:
                ledger.burn_from(txn, TOKEN, ledger.associated_account(TOKEN, ALICE), ALICE, 11)
        assert balance(store, ledger, ALICE) == 1_000
