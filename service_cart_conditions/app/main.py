"""
Cart Conditions service.

Entry point used by a host rule engine: takes a rule definition plus the
evaluation context and returns the condition's boolean decision.
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from shared.config import ServiceConfig, get_config
from shared.errors import ConditionServiceException, ConfigurationError
from shared.logging import configure_logging, evaluation_context, get_logger
from shared.metrics import MetricsCollector

from .adapters.memory import StaticSiteProvider
from .conditions.collaborators import (
    CartLookup, DiagnosticsSink, IdentityLookup, SiteContextProvider
)
from .conditions.evaluator import ConditionEvaluator, create_product_quantity_evaluator
from .conditions.models import ConditionConfig, Session, SiteContext


SPECIFIC_PRODUCT_QUANTITY = "specific_product_quantity"


class RuleDefinition(BaseModel):
    """Per-rule condition settings supplied by the rule engine."""
    kind: str = Field(SPECIFIC_PRODUCT_QUANTITY, description="Condition kind")
    product_id: str = Field(..., description="Product to count")
    threshold: Decimal = Field(..., description="Value the quantity is compared to")
    operator: Any = Field(..., description="Comparison operator tag")

    def to_config(self) -> ConditionConfig:
        return ConditionConfig(product_id=self.product_id, threshold=self.threshold)


class CartConditionService:
    """Cart conditions service implementation."""

    def __init__(self,
                 cart_lookup: CartLookup,
                 identity_lookup: IdentityLookup,
                 site_provider: Optional[SiteContextProvider] = None,
                 diagnostics_sink: Optional[DiagnosticsSink] = None,
                 config: Optional[ServiceConfig] = None):
        self.config = config or get_config()
        configure_logging(self.config.service_name, self.config.log_level, self.config.json_logs)
        self.logger = get_logger(f"{self.config.service_name}.service")

        self.metrics = MetricsCollector(self.config.service_name) if self.config.metrics_enabled else None
        self.site_provider = site_provider or StaticSiteProvider(self.config.default_site)

        self.evaluators: Dict[str, ConditionEvaluator] = {
            SPECIFIC_PRODUCT_QUANTITY: create_product_quantity_evaluator(
                cart_lookup,
                identity_lookup,
                diagnostics_sink=diagnostics_sink,
                metrics=self.metrics
            ),
        }

    def evaluate_rule(self,
                      rule: Union[RuleDefinition, Mapping[str, Any]],
                      session: Session,
                      site: Optional[SiteContext] = None) -> bool:
        """Evaluate a rule's condition for the current session and site."""
        definition = self._parse_rule(rule)
        evaluator = self._get_evaluator(definition.kind)
        site = site or self.site_provider.current_site()

        with evaluation_context(site=site.name if site else None, user_id=session.contact_id):
            try:
                return evaluator.evaluate(definition.to_config(), definition.operator, session, site)
            except ConditionServiceException as e:
                self.logger.error("Condition evaluation failed", kind=definition.kind, **e.to_dict())
                raise

    def describe_rule(self, rule: Union[RuleDefinition, Mapping[str, Any]]) -> str:
        """Authoring text for a rule's condition."""
        definition = self._parse_rule(rule)
        evaluator = self._get_evaluator(definition.kind)
        return evaluator.describe(definition.to_config(), definition.operator)

    def _parse_rule(self, rule: Union[RuleDefinition, Mapping[str, Any]]) -> RuleDefinition:
        try:
            definition = rule if isinstance(rule, RuleDefinition) else RuleDefinition(**rule)
            definition.to_config()
            return definition
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid rule definition",
                details={"errors": [err["msg"] for err in e.errors()]}
            ) from e

    def _get_evaluator(self, kind: str) -> ConditionEvaluator:
        evaluator = self.evaluators.get(kind)
        if evaluator is None:
            raise ConfigurationError(
                f"Unknown condition kind: {kind}",
                details={"kind": kind, "supported": sorted(self.evaluators)}
            )
        return evaluator


def create_service(cart_lookup: CartLookup,
                   identity_lookup: IdentityLookup,
                   **kwargs) -> CartConditionService:
    """Create the service with settings from the environment."""
    return CartConditionService(cart_lookup, identity_lookup, **kwargs)
