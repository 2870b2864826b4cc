"""
Data models for cart conditions.
"""

from typing import Optional, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ComparisonOperator(str, Enum):
    """Comparison operators."""
    EQUAL = "equal"
    NOT_EQUAL = "not_equal"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"


@dataclass(frozen=True)
class Product:
    """Product referenced by a cart line."""
    product_id: str


@dataclass(frozen=True)
class CartLine:
    """Line in a cart; product may be missing upstream."""
    product: Optional[Product]
    quantity: int = 0

    def __post_init__(self):
        if self.quantity < 0:
            raise ValueError(f"quantity must not be negative, got {self.quantity}")


@dataclass(frozen=True)
class Cart:
    """Fully loaded cart."""
    cart_id: str
    user_id: str
    lines: Sequence[Optional[CartLine]] = field(default_factory=tuple)


@dataclass(frozen=True)
class CartRef:
    """Lightweight cart reference returned by the list call."""
    cart_id: str
    user_id: str


@dataclass(frozen=True)
class CustomerRecord:
    """Authenticated customer resolved from an anonymous contact."""
    external_id: str


@dataclass(frozen=True)
class Session:
    """Visitor session; contact_id is the anonymous identity."""
    contact_id: str
    is_authenticated: bool = False


@dataclass(frozen=True)
class SiteContext:
    """Site the rule is evaluated for."""
    name: str


class ConditionConfig(BaseModel):
    """Immutable configuration of a product quantity condition."""

    model_config = ConfigDict(frozen=True)

    product_id: str = Field(..., description="Product to count")
    threshold: Decimal = Field(..., description="Value the quantity is compared to")

    @field_validator("product_id")
    @classmethod
    def _product_id_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("product_id must not be empty")
        return value


@dataclass(frozen=True)
class EvaluationResult:
    """Result of a condition evaluation."""
    outcome: bool
    metric: Decimal
    user_id: str
    operator: ComparisonOperator
    cart_count: int
    condition: str
