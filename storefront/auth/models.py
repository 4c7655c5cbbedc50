from dataclasses import dataclass
from typing import Optional, Union
from pydantic import BaseModel, Field


class CustomerLoginIn(BaseModel):
    phone: str = Field(..., max_length=32)
    pin: str = Field(..., max_length=16)


class FederatedLoginIn(BaseModel):
    idToken: str = Field(..., min_length=1)


# Caller resolved once per request, then handed to every operation explicitly.

@dataclass(frozen=True)
class Privileged:
    subject_id: str


@dataclass(frozen=True)
class CustomerSession:
    order_id: str
    phone: str
    phone_hash: Optional[str] = None


@dataclass(frozen=True)
class Anonymous:
    pass


Caller = Union[Privileged, CustomerSession, Anonymous]
