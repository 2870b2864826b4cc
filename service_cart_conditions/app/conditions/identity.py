"""
User identity resolution for cart lookups.
"""

from shared.logging import get_logger
from .collaborators import IdentityLookup
from .models import Session


class UserResolver:
    """Resolve the identity whose carts are inspected.

    Anonymous sessions use the contact id. Authenticated sessions use the
    customer's external id when the identity lookup finds one; any miss or
    lookup failure falls back to the contact id.
    """

    def __init__(self, identity_lookup: IdentityLookup):
        self.identity_lookup = identity_lookup
        self.logger = get_logger("cart_conditions.user_resolver")

    def resolve_user_id(self, session: Session) -> str:
        anonymous_id = session.contact_id
        if not session.is_authenticated:
            return anonymous_id

        try:
            customer = self.identity_lookup.get_user(anonymous_id)
        except Exception as e:
            self.logger.warning(
                "Identity lookup failed, using anonymous id",
                contact_id=anonymous_id,
                error=str(e)
            )
            return anonymous_id

        if customer is None or not customer.external_id:
            self.logger.debug("No customer for contact", contact_id=anonymous_id)
            return anonymous_id

        return customer.external_id
