"""
End-to-end flows against the stub node: resolve an account, build, sign and
submit requests to an ERC20 token, and read balances back.
"""
import pytest

from ledger_sdk.keys import encode_public_key_bytes
from ledger_sdk.node.exceptions import RejectReason, RejectedError
from ledger_sdk.signer.request_signer import RequestSigner
from ledger_sdk.transactions import build_instance_method_call, build_view_method_call
from ledger_sdk.values import BigIntegerValue, BooleanValue, IntValue, StorageReference
from conftest import ALICE_KEYS, BALANCE_OF, TO_BIG_INTEGER, TRANSFER


def _transfer(node_client, caller, token, recipient, nonce, amount):
    return build_instance_method_call(
        caller,
        nonce,
        node_client.get_chain_id(),
        100_000,
        node_client.get_safe_gas_price(),
        node_client.takamaka_code,
        TRANSFER,
        token,
        [recipient, IntValue(amount)]
    )


def test_transfer_from_resolved_account(node_client, resolver, stub_node, token):
    public_key = encode_public_key_bytes(ALICE_KEYS.public_key)
    account = resolver.resolve(public_key)

    request = _transfer(
        node_client, account, token, stub_node.gamete,
        node_client.get_nonce(account), 10
    )
    signed = RequestSigner().sign_request(request, ALICE_KEYS)
    assert node_client.submit(signed) == BooleanValue(True)


def test_reused_nonce_is_rejected(node_client, resolver, stub_node, token):
    account = resolver.resolve(ALICE_KEYS.public_key)
    signer = RequestSigner()
    nonce = node_client.get_nonce(account)

    first = signer.sign_request(_transfer(node_client, account, token, stub_node.gamete, nonce, 1), ALICE_KEYS)
    assert node_client.submit(first) == BooleanValue(True)

    second = signer.sign_request(_transfer(node_client, account, token, stub_node.gamete, nonce, 2), ALICE_KEYS)
    with pytest.raises(RejectedError) as exc_info:
        node_client.submit(second)
    assert exc_info.value.reason is RejectReason.STALE_NONCE
    # A refreshed nonce goes through
    third = signer.sign_request(
        _transfer(node_client, account, token, stub_node.gamete, node_client.get_nonce(account), 2),
        ALICE_KEYS
    )
    assert node_client.submit(third) == BooleanValue(True)


def test_balance_after_transfer(node_client, helper, stub_node, token, alice_account):
    assert helper.add_instance_method_call(
        ALICE_KEYS, alice_account, TRANSFER, token, stub_node.gamete, IntValue(10)
    ) == BooleanValue(True)

    balance = node_client.query(build_view_method_call(
        alice_account, 100_000, node_client.takamaka_code, BALANCE_OF, token, [alice_account]
    ))
    assert isinstance(balance, StorageReference)
    value = node_client.query(build_view_method_call(
        alice_account, 100_000, node_client.takamaka_code, TO_BIG_INTEGER, balance
    ))
    assert value == BigIntegerValue(90)

    received = helper.run_view_method_call(alice_account, BALANCE_OF, token, stub_node.gamete)
    assert helper.run_view_method_call(alice_account, TO_BIG_INTEGER, received).value == 10
