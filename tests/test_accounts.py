"""
Tests for resolving public keys to accounts.
"""
from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ledger_sdk.accounts import AccountResolver
from ledger_sdk.exceptions import AccountNotFound, DecodeError
from ledger_sdk.keys import public_key_lookup_string
from ledger_sdk.types import GET_FROM_ACCOUNTS_LEDGER, ClassType
from ledger_sdk.values import StringValue
from conftest import ALICE_KEYS, BOB_KEYS, GAMETE_KEYS


def test_resolve_minted_account(resolver, alice_account):
    assert resolver.resolve(ALICE_KEYS.public_key) == alice_account


def test_resolve_from_key_object(resolver, alice_account):
    private_key = Ed25519PrivateKey.from_private_bytes(ALICE_KEYS.private_key)
    assert resolver.resolve(private_key.public_key()) == alice_account


def test_lookup_request(resolver, node_client, alice_account):
    """The lookup is a view call on the accounts ledger, run by the gamete"""
    with patch.object(node_client, "query", wraps=node_client.query) as query:
        resolver.resolve(ALICE_KEYS.public_key)
    request = query.call_args[0][0]
    assert request.method == GET_FROM_ACCOUNTS_LEDGER
    assert request.method.member_name == "get"
    assert request.method.parameter_types == (ClassType.STRING,)
    assert request.caller == node_client.gamete
    assert request.receiver == node_client.accounts_ledger
    assert request.classpath == node_client.takamaka_code
    assert request.actuals == (StringValue(public_key_lookup_string(ALICE_KEYS.public_key)),)


def test_unknown_account(resolver):
    with pytest.raises(AccountNotFound) as exc_info:
        resolver.resolve(BOB_KEYS.public_key)
    assert exc_info.value.public_key == public_key_lookup_string(BOB_KEYS.public_key)


def test_gamete_is_not_in_the_ledger(resolver):
    with pytest.raises(AccountNotFound):
        resolver.resolve(GAMETE_KEYS.public_key)


def test_invalid_public_key(resolver, node_client):
    with patch.object(node_client, "query") as query:
        with pytest.raises(DecodeError):
            resolver.resolve(b"\x00" * 12)
    query.assert_not_called()


class TestCache:
    """Tests for the optional TTL cache of resolved accounts."""

    def test_resolved_accounts_are_cached(self, node_client, alice_account):
        resolver = AccountResolver(node_client, cache_ttl=60)
        with patch.object(node_client, "query", wraps=node_client.query) as query:
            assert resolver.resolve(ALICE_KEYS.public_key) == alice_account
            assert resolver.resolve(ALICE_KEYS.public_key) == alice_account
        assert query.call_count == 1

    def test_forget(self, node_client, alice_account):
        resolver = AccountResolver(node_client, cache_ttl=60)
        with patch.object(node_client, "query", wraps=node_client.query) as query:
            resolver.resolve(ALICE_KEYS.public_key)
            resolver.forget(ALICE_KEYS.public_key)
            resolver.resolve(ALICE_KEYS.public_key)
        assert query.call_count == 2

    def test_missing_accounts_are_not_cached(self, node_client, helper):
        resolver = AccountResolver(node_client, cache_ttl=60)
        with pytest.raises(AccountNotFound):
            resolver.resolve(BOB_KEYS.public_key)
        bob_account = helper.mint(GAMETE_KEYS, BOB_KEYS.public_key, 1)
        assert resolver.resolve(BOB_KEYS.public_key) == bob_account

    def test_no_cache_by_default(self, resolver, node_client, alice_account):
        with patch.object(node_client, "query", wraps=node_client.query) as query:
            resolver.resolve(ALICE_KEYS.public_key)
            resolver.resolve(ALICE_KEYS.public_key)
        assert query.call_count == 2
