"""
Collaborator interfaces consumed by the condition evaluator.

The host provides concrete implementations. Everything here is structural
(``typing.Protocol``), so adapters do not need to inherit from these classes.
"""

from typing import Any, Dict, Optional, Protocol, Sequence, runtime_checkable

from shared.logging import get_logger
from .models import Cart, CartRef, CustomerRecord, Session, SiteContext


@runtime_checkable
class CartLookup(Protocol):
    """Cart storage. Must return an empty sequence, not raise, on no results."""

    def list_carts(self, site: SiteContext, user_ids: Sequence[str]) -> Sequence[Optional[CartRef]]:
        ...

    def load_cart(self, site: SiteContext, cart_id: str, user_id: str) -> Optional[Cart]:
        ...


@runtime_checkable
class IdentityLookup(Protocol):
    """Customer directory keyed by anonymous contact id."""

    def get_user(self, anonymous_id: str) -> Optional[CustomerRecord]:
        ...


@runtime_checkable
class SiteContextProvider(Protocol):
    """Source of the current site."""

    def current_site(self) -> Optional[SiteContext]:
        ...


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Receives one structured record per evaluation."""

    def emit(self, record: Dict[str, Any]) -> None:
        ...


class RuleContext(Protocol):
    """Anything exposing the session and site of a rule evaluation."""

    @property
    def session(self) -> Session:
        ...

    @property
    def site(self) -> Optional[SiteContext]:
        ...


class StructlogDiagnosticsSink:
    """Default sink: writes the record as a structured log event."""

    def __init__(self, logger_name: str = "cart_conditions.diagnostics"):
        self.logger = get_logger(logger_name)

    def emit(self, record: Dict[str, Any]) -> None:
        self.logger.info("Condition evaluated", **record)
