"""
Role Authorizer

Equality-based role checks on an already verified Identity. There is no role
hierarchy: a requirement for role X is satisfied only by role X.
"""

import logging
from typing import Any, Optional

from food_ordering.core.errors import AuthorizationError
from food_ordering.security.identity import Identity, Role

logger = logging.getLogger(__name__)


def denial_message(role: Role) -> str:
    """Client-facing denial naming only the required role class."""
    return f"Access denied. {Role(role).value.capitalize()} rights required."


class RoleAuthorizer:
    """Allows or denies a verified identity."""

    def authorize(self, identity: Optional[Identity], required_role: Role) -> Identity:
        """
        Require identity.role == required_role.

        Returns:
            The identity, for chaining in dependencies

        Raises:
            AuthorizationError: role does not match
            RuntimeError: called without a verified identity
        """
        if identity is None:
            raise RuntimeError("authorize() called before token verification")

        if identity.role != required_role:
            logger.warning(
                f"Denied user {identity.user_id}: role '{identity.role.value}' "
                f"lacks '{Role(required_role).value}'"
            )
            raise AuthorizationError(denial_message(required_role))
        return identity

    def authorize_owner(
        self,
        identity: Optional[Identity],
        owner_id: Any,
        override_role: Optional[Role] = Role.ADMIN,
    ) -> Identity:
        """
        Allow the owner of a record, or any identity holding override_role.
        Pass override_role=None for owner-only actions.

        Raises:
            AuthorizationError: neither owner nor override role
            RuntimeError: called without a verified identity
        """
        if identity is None:
            raise RuntimeError("authorize_owner() called before token verification")

        if identity.user_id == str(owner_id):
            return identity
        if override_role is not None and identity.role == override_role:
            return identity

        logger.warning(f"Denied user {identity.user_id}: not the owner of the record")
        raise AuthorizationError("Access denied")
