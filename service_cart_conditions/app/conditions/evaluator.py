"""
Condition evaluator for cart metrics.
"""

from contextlib import nullcontext
from decimal import Decimal
from typing import Any, Callable, List, Optional, TypeVar

from shared.errors import PreconditionError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .aggregation import MetricStrategy, product_quantity_metric
from .collaborators import (
    CartLookup, DiagnosticsSink, IdentityLookup, RuleContext, StructlogDiagnosticsSink
)
from .identity import UserResolver
from .models import Cart, ConditionConfig, EvaluationResult, Session, SiteContext
from .operators import OperatorTag, compare, operator_symbol, parse_operator


MetricStrategyFactory = Callable[[ConditionConfig], MetricStrategy]
ThresholdProvider = Callable[[ConditionConfig], Any]

ContextT = TypeVar("ContextT", bound=RuleContext)

PRODUCT_QUANTITY_CONDITION = "SpecificProductQuantityCondition"


class ConditionEvaluator:
    """Evaluate a cart metric against a threshold.

    The metric and the threshold are supplied per condition kind as plain
    callables, so the evaluator itself is the same for every kind. An
    instance holds only read-only collaborator references and may be shared
    across threads.
    """

    def __init__(self,
                 cart_lookup: CartLookup,
                 identity_lookup: IdentityLookup,
                 metric_strategy_factory: MetricStrategyFactory,
                 threshold_provider: ThresholdProvider,
                 condition_name: str,
                 diagnostics_sink: Optional[DiagnosticsSink] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.cart_lookup = cart_lookup
        self.user_resolver = UserResolver(identity_lookup)
        self.metric_strategy_factory = metric_strategy_factory
        self.threshold_provider = threshold_provider
        self.condition_name = condition_name
        self.diagnostics_sink = diagnostics_sink or StructlogDiagnosticsSink()
        self.metrics = metrics
        self.logger = get_logger("cart_conditions.evaluator")

    def evaluate(self,
                 config: ConditionConfig,
                 operator: OperatorTag,
                 session: Session,
                 site_context: Optional[SiteContext]) -> bool:
        """Evaluate the condition and return the outcome."""
        return self.evaluate_detailed(config, operator, session, site_context).outcome

    def evaluate_in_context(self, config: ConditionConfig, operator: OperatorTag, context: ContextT) -> bool:
        """Evaluate using the session and site exposed by a rule context."""
        return self.evaluate(config, operator, context.session, context.site)

    def evaluate_detailed(self,
                          config: ConditionConfig,
                          operator: OperatorTag,
                          session: Session,
                          site_context: Optional[SiteContext]) -> EvaluationResult:
        """Evaluate the condition and return the outcome with diagnostics."""
        if site_context is None:
            raise PreconditionError(
                "Site context is required to evaluate a cart condition",
                details={"condition": self.condition_name, "reason": "MISSING_SITE_CONTEXT"}
            )

        resolved_operator = parse_operator(operator)

        timer = self.metrics.time(self.condition_name) if self.metrics else nullcontext()
        with timer:
            user_id = self.user_resolver.resolve_user_id(session)
            carts = self._fetch_carts(site_context, user_id)

            metric = self.metric_strategy_factory(config)(carts)
            # Integer counts are widened to Decimal so a fractional threshold
            # is never truncated.
            metric_value = Decimal(metric)
            outcome = compare(resolved_operator, metric_value, self.threshold_provider(config))

        result = EvaluationResult(
            outcome=outcome,
            metric=metric_value,
            user_id=user_id,
            operator=resolved_operator,
            cart_count=len(carts),
            condition=self.condition_name,
        )

        if self.metrics:
            self.metrics.record_evaluation(self.condition_name, resolved_operator.value, outcome)

        self._emit_diagnostics(result, site_context)
        return result

    def describe(self, config: ConditionConfig, operator: OperatorTag) -> str:
        """Human-readable condition text."""
        return (
            f"where the quantity of product {config.product_id} in user's cart "
            f"{operator_symbol(operator)} {self.threshold_provider(config)}"
        )

    def _fetch_carts(self, site_context: SiteContext, user_id: str) -> List[Optional[Cart]]:
        """List the user's carts, then load each one."""
        refs = self.cart_lookup.list_carts(site_context, [user_id]) or []
        return [
            self.cart_lookup.load_cart(site_context, ref.cart_id, user_id) if ref is not None else None
            for ref in refs
        ]

    def _emit_diagnostics(self, result: EvaluationResult, site_context: SiteContext):
        record = {
            "condition": result.condition,
            "site": site_context.name,
            "user_id": result.user_id,
            "operator": result.operator.value,
            "result": result.outcome,
            "cart_count": result.cart_count,
        }
        try:
            self.diagnostics_sink.emit(record)
        except Exception as e:
            self.logger.warning("Diagnostics sink failed", condition=result.condition, error=str(e))


def create_product_quantity_evaluator(cart_lookup: CartLookup,
                                      identity_lookup: IdentityLookup,
                                      diagnostics_sink: Optional[DiagnosticsSink] = None,
                                      metrics: Optional[MetricsCollector] = None) -> ConditionEvaluator:
    """Evaluator for "quantity of product X in user's carts <op> N"."""
    return ConditionEvaluator(
        cart_lookup=cart_lookup,
        identity_lookup=identity_lookup,
        metric_strategy_factory=lambda config: product_quantity_metric(config.product_id),
        threshold_provider=lambda config: config.threshold,
        condition_name=PRODUCT_QUANTITY_CONDITION,
        diagnostics_sink=diagnostics_sink,
        metrics=metrics,
    )
