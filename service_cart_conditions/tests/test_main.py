"""
Unit tests for the Cart Conditions service facade.
"""

import pytest
from decimal import Decimal
from unittest.mock import MagicMock, patch

from structlog.testing import capture_logs

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_cart_conditions.app.main import (
    CartConditionService, RuleDefinition, SPECIFIC_PRODUCT_QUANTITY, create_service
)
from service_cart_conditions.app.conditions.models import (
    Cart, CartLine, CartRef, Product, Session, SiteContext
)
from shared.config import ServiceConfig
from shared.errors import ConfigurationError, PreconditionError, UnsupportedOperator
from shared.logging import request_id_var, set_request_id, site_var


class TestCartConditionService:
    """Test cases for CartConditionService."""

    @pytest.fixture(autouse=True)
    def no_logging_setup(self):
        """Keep global logging configuration untouched."""
        with patch("service_cart_conditions.app.main.configure_logging") as mock_configure:
            yield mock_configure

    @pytest.fixture
    def cart_lookup(self):
        """Mock cart lookup with one cart holding three SKU-1."""
        lookup = MagicMock()
        lookup.list_carts.return_value = [CartRef(cart_id="cart-1", user_id="contact-1")]
        lookup.load_cart.return_value = Cart(
            cart_id="cart-1",
            user_id="contact-1",
            lines=[CartLine(product=Product("SKU-1"), quantity=3)]
        )
        return lookup

    @pytest.fixture
    def identity_lookup(self):
        lookup = MagicMock()
        lookup.get_user.return_value = None
        return lookup

    @pytest.fixture
    def config(self):
        """Service settings without environment lookups."""
        return ServiceConfig(log_level="debug", json_logs=False, default_site="storefront")

    @pytest.fixture
    def service(self, cart_lookup, identity_lookup, config):
        """Create CartConditionService instance."""
        return CartConditionService(cart_lookup, identity_lookup, diagnostics_sink=MagicMock(), config=config)

    @pytest.fixture
    def rule(self):
        return {"product_id": "SKU-1", "threshold": "3", "operator": ">="}

    def test_configures_logging(self, service, no_logging_setup):
        """Test logging is configured from settings."""
        no_logging_setup.assert_called_once_with("cart_conditions", "debug", False)

    def test_evaluate_rule_mapping(self, service, rule):
        """Test evaluating a rule given as a mapping."""
        assert service.evaluate_rule(rule, Session(contact_id="contact-1")) is True

    def test_evaluate_rule_definition(self, service):
        """Test evaluating a RuleDefinition."""
        rule = RuleDefinition(product_id="SKU-1", threshold=Decimal("3.5"), operator="less_than")

        assert rule.kind == SPECIFIC_PRODUCT_QUANTITY
        assert service.evaluate_rule(rule, Session(contact_id="contact-1")) is True

    def test_default_site_used(self, service, rule, cart_lookup):
        """Test the configured default site is used when none is passed."""
        service.evaluate_rule(rule, Session(contact_id="contact-1"))

        cart_lookup.list_carts.assert_called_once_with(SiteContext(name="storefront"), ["contact-1"])

    def test_explicit_site_wins(self, service, rule, cart_lookup):
        """Test an explicit site overrides the provider."""
        site = SiteContext(name="outlet")

        service.evaluate_rule(rule, Session(contact_id="contact-1"), site=site)

        cart_lookup.list_carts.assert_called_once_with(site, ["contact-1"])

    def test_site_provider(self, cart_lookup, identity_lookup, rule):
        """Test an injected site provider is consulted."""
        provider = MagicMock()
        provider.current_site.return_value = SiteContext(name="from-provider")
        service = CartConditionService(
            cart_lookup, identity_lookup, site_provider=provider, config=ServiceConfig(metrics_enabled=False)
        )

        service.evaluate_rule(rule, Session(contact_id="contact-1"))

        provider.current_site.assert_called_once()
        assert service.metrics is None
        cart_lookup.list_carts.assert_called_once_with(SiteContext(name="from-provider"), ["contact-1"])

    def test_missing_site(self, cart_lookup, identity_lookup, rule):
        """Test no site anywhere is a precondition error."""
        service = CartConditionService(cart_lookup, identity_lookup, config=ServiceConfig(default_site=None))

        with pytest.raises(PreconditionError):
            service.evaluate_rule(rule, Session(contact_id="contact-1"))

    @pytest.mark.parametrize("operator", ["roughly", None, 3])
    def test_unsupported_operator(self, service, rule, operator):
        """Test unsupported operator tags of any type raise UnsupportedOperator."""
        rule["operator"] = operator

        with pytest.raises(UnsupportedOperator) as exc_info:
            service.evaluate_rule(rule, Session(contact_id="contact-1"))

        assert exc_info.value.code == "UNSUPPORTED_OPERATOR"

    def test_failure_logged(self, cart_lookup, identity_lookup, rule):
        """Test evaluation failures are logged with the error payload."""
        service = CartConditionService(cart_lookup, identity_lookup, config=ServiceConfig(default_site=None))

        with capture_logs() as logs:
            with pytest.raises(PreconditionError):
                service.evaluate_rule(rule, Session(contact_id="contact-1"))

        failures = [entry for entry in logs if entry["event"] == "Condition evaluation failed"]
        assert len(failures) == 1
        assert failures[0]["code"] == "PRECONDITION_ERROR"
        assert failures[0]["kind"] == SPECIFIC_PRODUCT_QUANTITY
        assert failures[0]["details"]["reason"] == "MISSING_SITE_CONTEXT"

    def test_host_request_id_preserved(self, service, rule):
        """Test a request ID set by the host survives evaluation."""
        seen = []
        sink = service.evaluators[SPECIFIC_PRODUCT_QUANTITY].diagnostics_sink
        sink.emit.side_effect = lambda record: seen.append((request_id_var.get(), site_var.get()))

        token = request_id_var.set(None)
        try:
            set_request_id("host-request-1")
            service.evaluate_rule(rule, Session(contact_id="contact-1"))

            assert seen == [("host-request-1", "storefront")]
            assert request_id_var.get() == "host-request-1"
            assert site_var.get() is None
        finally:
            request_id_var.reset(token)

    def test_request_id_generated_and_restored(self, service, rule):
        """Test a request ID is generated per evaluation when the host has none."""
        seen = []
        sink = service.evaluators[SPECIFIC_PRODUCT_QUANTITY].diagnostics_sink
        sink.emit.side_effect = lambda record: seen.append(request_id_var.get())

        token = request_id_var.set(None)
        try:
            service.evaluate_rule(rule, Session(contact_id="contact-1"))

            assert seen[0]
            assert request_id_var.get() is None
        finally:
            request_id_var.reset(token)

    @pytest.mark.parametrize("bad_rule", [
        {"threshold": 1, "operator": "="},
        {"product_id": "", "threshold": 1, "operator": "="},
        {"product_id": "SKU-1", "threshold": "lots", "operator": "="},
    ])
    def test_invalid_rule(self, service, bad_rule):
        """Test malformed rules raise ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            service.evaluate_rule(bad_rule, Session(contact_id="contact-1"))

        assert exc_info.value.code == "CONFIGURATION_ERROR"
        assert exc_info.value.details["errors"]

    def test_unknown_kind(self, service, rule):
        """Test unknown condition kinds are rejected."""
        rule["kind"] = "cart_total_amount"

        with pytest.raises(ConfigurationError) as exc_info:
            service.evaluate_rule(rule, Session(contact_id="contact-1"))

        assert exc_info.value.details["supported"] == [SPECIFIC_PRODUCT_QUANTITY]

    def test_describe_rule(self, service, rule):
        """Test the rule's authoring text."""
        assert service.describe_rule(rule) == "where the quantity of product SKU-1 in user's cart >= 3"

    def test_create_service(self, cart_lookup, identity_lookup):
        """Test the factory builds a service with settings."""
        service = create_service(cart_lookup, identity_lookup, config=ServiceConfig(env="test"))

        assert isinstance(service, CartConditionService)
        assert service.config.env == "test"
