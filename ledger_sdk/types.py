"""
Storage types and call signatures understood by the remote node.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class BasicType(str, Enum):
    """Primitive types that carry a value variant."""
    BOOLEAN = "boolean"
    INT = "int"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ClassType:
    """A class type, identified by its fully qualified name."""
    name: str

    def __str__(self) -> str:
        return self.name


StorageType = Union[BasicType, ClassType]

# Well-known class types installed in the node's code base
ClassType.OBJECT = ClassType("java.lang.Object")
ClassType.STRING = ClassType("java.lang.String")
ClassType.BIG_INTEGER = ClassType("java.math.BigInteger")
ClassType.CONTRACT = ClassType("io.takamaka.code.lang.Contract")
ClassType.ACCOUNT = ClassType("io.takamaka.code.lang.Account")
ClassType.EOA = ClassType("io.takamaka.code.lang.ExternallyOwnedAccount")
ClassType.GAMETE = ClassType("io.takamaka.code.lang.Gamete")
ClassType.ACCOUNTS_LEDGER = ClassType("io.takamaka.code.lang.AccountsLedger")
ClassType.MANIFEST = ClassType("io.takamaka.code.governance.Manifest")
ClassType.GAS_STATION = ClassType("io.takamaka.code.governance.GasStation")
ClassType.ERC20 = ClassType("io.takamaka.code.tokens.ERC20")
ClassType.UNSIGNED_BIG_INTEGER = ClassType("io.takamaka.code.math.UnsignedBigInteger")


def type_from_name(name: str) -> StorageType:
    """
    Parse a storage type from its wire name.

    Args:
        name: "boolean", "int" or a fully qualified class name

    Returns:
        The corresponding storage type

    Raises:
        ValueError: If the name is empty
    """
    if not name:
        raise ValueError("Type name cannot be empty")
    try:
        return BasicType(name)
    except ValueError:
        return ClassType(name)


@dataclass(frozen=True)
class CallSignature:
    """
    Signature of a constructor or method of the node's code.

    Immutable and hashable, so it can key dispatch tables.

    Attributes:
        declaring_type: Class declaring the constructor or method
        parameter_types: Ordered formal parameter types
        member_name: Method name, None for constructors
        return_type: Return type, None for void methods and constructors
    """
    declaring_type: ClassType
    parameter_types: Tuple[StorageType, ...] = ()
    member_name: Optional[str] = None
    return_type: Optional[StorageType] = None

    def __post_init__(self):
        # Accept any iterable of parameter types but store a tuple
        object.__setattr__(self, "parameter_types", tuple(self.parameter_types))
        if self.member_name is None and self.return_type is not None:
            raise ValueError("Constructors cannot declare a return type")
        if self.member_name is not None and not self.member_name:
            raise ValueError("Method name cannot be empty")

    @property
    def is_constructor(self) -> bool:
        return self.member_name is None

    @property
    def is_void(self) -> bool:
        return self.return_type is None

    def __str__(self) -> str:
        formals = ", ".join(str(t) for t in self.parameter_types)
        if self.is_constructor:
            return f"{self.declaring_type}({formals})"
        returns = str(self.return_type) if self.return_type is not None else "void"
        return f"{returns} {self.declaring_type}.{self.member_name}({formals})"


def constructor_signature(declaring_type: ClassType, *parameter_types: StorageType) -> CallSignature:
    """Signature of a constructor of ``declaring_type``."""
    return CallSignature(declaring_type, parameter_types)


def method_signature(
    declaring_type: ClassType,
    member_name: str,
    return_type: StorageType,
    *parameter_types: StorageType
) -> CallSignature:
    """Signature of a method returning ``return_type``."""
    return CallSignature(declaring_type, parameter_types, member_name, return_type)


def void_method_signature(
    declaring_type: ClassType,
    member_name: str,
    *parameter_types: StorageType
) -> CallSignature:
    """Signature of a void method."""
    return CallSignature(declaring_type, parameter_types, member_name, None)


# Methods the client calls on the node's own objects
GET_GAMETE = method_signature(ClassType.MANIFEST, "getGamete", ClassType.GAMETE)
GET_ACCOUNTS_LEDGER = method_signature(ClassType.MANIFEST, "getAccountsLedger", ClassType.ACCOUNTS_LEDGER)
GET_GAS_STATION = method_signature(ClassType.MANIFEST, "getGasStation", ClassType.GAS_STATION)
GET_CHAIN_ID = method_signature(ClassType.MANIFEST, "getChainId", ClassType.STRING)
NONCE = method_signature(ClassType.ACCOUNT, "nonce", ClassType.BIG_INTEGER)
GET_GAS_PRICE = method_signature(ClassType.GAS_STATION, "getGasPrice", ClassType.BIG_INTEGER)
IGNORES_GAS_PRICE = method_signature(ClassType.GAS_STATION, "ignoresGasPrice", BasicType.BOOLEAN)
GET_FROM_ACCOUNTS_LEDGER = method_signature(
    ClassType.ACCOUNTS_LEDGER, "get", ClassType.EOA, ClassType.STRING
)
MINT = method_signature(
    ClassType.ACCOUNTS_LEDGER, "mint", ClassType.EOA, ClassType.BIG_INTEGER, ClassType.STRING
)
BURN = method_signature(
    ClassType.ACCOUNTS_LEDGER, "burn", ClassType.EOA, ClassType.BIG_INTEGER, ClassType.STRING
)
