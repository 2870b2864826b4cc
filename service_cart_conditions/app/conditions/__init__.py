"""
Cart conditions package.

Defines the condition model and evaluation pipeline used by the Cart
Conditions service. A condition resolves the user, loads their carts,
aggregates a metric and compares it to a threshold, returning a boolean
decision plus diagnostics for observability.

Modules of interest:
- models: Data classes for carts, sessions, configuration and results.
- operators: Comparison operator parsing and evaluation.
- aggregation: Cart metric strategies.
- identity: Anonymous/customer identity resolution.
- evaluator: The evaluation pipeline.
"""

from .evaluator import ConditionEvaluator, create_product_quantity_evaluator
from .models import (
    Cart, CartLine, CartRef, ComparisonOperator, ConditionConfig,
    CustomerRecord, EvaluationResult, Product, Session, SiteContext
)

__all__ = [
    "ConditionEvaluator",
    "create_product_quantity_evaluator",
    "Cart",
    "CartLine",
    "CartRef",
    "ComparisonOperator",
    "ConditionConfig",
    "CustomerRecord",
    "EvaluationResult",
    "Product",
    "Session",
    "SiteContext",
]
