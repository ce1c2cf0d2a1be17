"""
Wire models exchanged with the remote node as JSON.
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class StorageValueModel(BaseModel):
    """Tagged value; integers travel as decimal strings to keep full precision"""
    kind: str
    value: str


class CodeSignatureModel(BaseModel):
    """Constructor or method signature"""
    model_config = ConfigDict(populate_by_name=True)

    declaring_type: str = Field(..., alias="definingClass")
    member_name: Optional[str] = Field(None, alias="methodName")
    parameter_types: List[str] = Field(default_factory=list, alias="formals")
    return_type: Optional[str] = Field(None, alias="returnType")


class ConstructorCallRequestModel(BaseModel):
    """Signed request running a constructor"""
    model_config = ConfigDict(populate_by_name=True)

    caller: str
    nonce: str
    chain_id: str = Field(..., alias="chainId")
    gas_limit: str = Field(..., alias="gasLimit")
    gas_price: str = Field(..., alias="gasPrice")
    classpath: str
    constructor: CodeSignatureModel
    actuals: List[StorageValueModel]
    signature: str  # hex


class InstanceMethodCallRequestModel(BaseModel):
    """Signed request running an instance method"""
    model_config = ConfigDict(populate_by_name=True)

    caller: str
    nonce: str
    chain_id: str = Field(..., alias="chainId")
    gas_limit: str = Field(..., alias="gasLimit")
    gas_price: str = Field(..., alias="gasPrice")
    classpath: str
    method: CodeSignatureModel
    receiver: str
    actuals: List[StorageValueModel]
    signature: str  # hex


class ViewMethodCallRequestModel(BaseModel):
    """Unsigned request running a view method; it has no nonce and no signature"""
    model_config = ConfigDict(populate_by_name=True)

    caller: str
    gas_limit: str = Field(..., alias="gasLimit")
    classpath: str
    method: CodeSignatureModel
    receiver: str
    actuals: List[StorageValueModel]


class ErrorModel(BaseModel):
    """Fault descriptor returned by the node"""
    model_config = ConfigDict(populate_by_name=True)

    kind: str
    message: str
    reason: Optional[str] = None
    exception_class_name: Optional[str] = Field(None, alias="exceptionClassName")
