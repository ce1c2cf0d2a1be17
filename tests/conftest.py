"""
Pytest fixtures for the ledger SDK tests.

Every node used here is the in-memory ``StubTransport``, with an ERC20 token
simulated by handlers so that whole transaction flows can run offline.
"""
from typing import Dict

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from ledger_sdk.accounts import AccountResolver
from ledger_sdk.helpers import TransactionHelper
from ledger_sdk.keys import KeyPair
from ledger_sdk.node._rate_limited_log import reset_rate_limits
from ledger_sdk.node.client import NodeClient
from ledger_sdk.node.stub_transport import StubTransport
from ledger_sdk.types import (
    BasicType, ClassType, constructor_signature, method_signature
)
from ledger_sdk.values import (
    BigIntegerValue, BooleanValue, IntValue, StorageReference, StringValue
)

TEST_NODE_URL = "http://localhost:8080"
TEST_CHAIN_ID = "test-chain"
INITIAL_FUNDS = 1_000_000

ERC20_CONSTRUCTOR = constructor_signature(
    ClassType.ERC20, ClassType.STRING, ClassType.STRING, BasicType.INT
)
TRANSFER = method_signature(
    ClassType.ERC20, "transfer", BasicType.BOOLEAN, ClassType.CONTRACT, BasicType.INT
)
BALANCE_OF = method_signature(
    ClassType.ERC20, "balanceOf", ClassType.UNSIGNED_BIG_INTEGER, ClassType.CONTRACT
)
TO_BIG_INTEGER = method_signature(
    ClassType.UNSIGNED_BIG_INTEGER, "toBigInteger", ClassType.BIG_INTEGER
)


def key_pair_from_seed(seed: bytes) -> KeyPair:
    """Deterministic key pair, so that failures are reproducible."""
    private_key = Ed25519PrivateKey.from_private_bytes(seed)
    public_key = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return KeyPair(public_key=public_key, private_key=seed)


GAMETE_KEYS = key_pair_from_seed(bytes(range(32)))
ALICE_KEYS = key_pair_from_seed(bytes(range(1, 33)))
BOB_KEYS = key_pair_from_seed(bytes(range(2, 34)))


class Erc20Simulation:
    """
    Minimal ERC20 living on a stub node: the creator receives the whole
    initial supply, balances are handed out as UnsignedBigInteger objects.
    """

    def __init__(self, node: StubTransport):
        self.node = node
        self.holders: Dict[StorageReference, Dict[StorageReference, int]] = {}
        self.unsigned_big_integers: Dict[StorageReference, int] = {}
        node.register_constructor(ERC20_CONSTRUCTOR, self.create)
        node.register_method(TRANSFER, self.transfer)
        node.register_method(BALANCE_OF, self.balance_of)
        node.register_method(TO_BIG_INTEGER, self.to_big_integer)

    def create(self, context, receiver, actuals):
        supply = actuals[2].value
        if supply < 0:
            raise ValueError("The initial supply cannot be negative")
        token = self.node.new_reference()
        self.holders[token] = {context.caller: supply}
        return token

    def transfer(self, context, receiver, actuals):
        holders = self.holders[receiver]
        recipient, amount = actuals[0], actuals[1].value
        if amount < 0 or holders.get(context.caller, 0) < amount:
            raise ArithmeticError("Insufficient balance")
        holders[context.caller] -= amount
        holders[recipient] = holders.get(recipient, 0) + amount
        return BooleanValue(True)

    def balance_of(self, context, receiver, actuals):
        result = self.node.new_reference()
        self.unsigned_big_integers[result] = self.holders[receiver].get(actuals[0], 0)
        return result

    def to_big_integer(self, context, receiver, actuals):
        return BigIntegerValue(self.unsigned_big_integers[receiver])


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    """Rate-limited warnings must not leak between tests"""
    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture
def gamete_keys():
    return GAMETE_KEYS


@pytest.fixture
def alice_keys():
    return ALICE_KEYS


@pytest.fixture
def bob_keys():
    return BOB_KEYS


@pytest.fixture
def stub_node():
    """Stub node with a funded gamete and an ERC20 simulation"""
    node = StubTransport(chain_id=TEST_CHAIN_ID)
    node.create_gamete(GAMETE_KEYS.public_key, INITIAL_FUNDS)
    node.erc20 = Erc20Simulation(node)
    return node


@pytest.fixture
def node_client(stub_node):
    client = NodeClient(TEST_NODE_URL, transport=stub_node)
    yield client
    client.close()


@pytest.fixture
def helper(node_client):
    return TransactionHelper(node_client)


@pytest.fixture
def resolver(node_client):
    return AccountResolver(node_client)


@pytest.fixture
def alice_account(helper):
    """Alice's account, created by the gamete through a mint"""
    return helper.mint(GAMETE_KEYS, ALICE_KEYS.public_key, 10_000)


@pytest.fixture
def token(helper, alice_account):
    """ERC20 token created by Alice with a supply of 100"""
    return helper.add_constructor_call(
        ALICE_KEYS, alice_account, ERC20_CONSTRUCTOR,
        StringValue("Test Token"), StringValue("TST"), IntValue(100)
    )
