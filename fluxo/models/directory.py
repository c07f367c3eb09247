"""Read-mostly reference data: accounts, clients/suppliers, categories."""

from enum import Enum
from typing import Optional

from pydantic import Field

from fluxo.models.base import DomainModel


class CategoryType(str, Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"


class CounterpartyRole(str, Enum):
    CLIENT = "client"
    SUPPLIER = "supplier"


class Account(DomainModel):
    """Cash or bank account that funds or receives a settlement."""
    id: Optional[str] = Field(default=None, validation_alias="_id", serialization_alias="_id")
    name: str
    type: str = "bank"  # bank | cash | card ...


class Counterparty(DomainModel):
    id: Optional[str] = Field(default=None, validation_alias="_id", serialization_alias="_id")
    name: str
    role: CounterpartyRole


class Category(DomainModel):
    id: Optional[str] = Field(default=None, validation_alias="_id", serialization_alias="_id")
    name: str
    type: CategoryType
