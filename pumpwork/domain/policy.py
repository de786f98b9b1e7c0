from collections.abc import Sequence
from typing import Any

from pumpwork.domain.access import Identity
from pumpwork.rules.models import Rules


class PolicyEngine:
    def __init__(self, rules: Rules):
        self.rules = rules

    def check_permission(
        self,
        identity: Identity | None,
        action: str,
        roles: Sequence[str] | None = None,
    ) -> bool:
        """
        Check if the identity may perform the action.

        Order of precedence:
        1. Public Permissions (Global)
        2. Role-Based Access Control on the token-gated effective role
        """
        if action in self.rules.rbac.public_permissions:
            return True

        if identity is None or not identity.is_authenticated:
            return False

        for role in roles if roles is not None else identity.roles:
            allowed_actions = self.rules.rbac.roles.get(role, [])
            if "*" in allowed_actions:
                return True
            if action in allowed_actions:
                return True

            # Scoped wildcards, e.g. "jobs:*" matches "jobs:create"
            if ":" in action:
                scope = action.split(":")[0]
                if f"{scope}:*" in allowed_actions:
                    return True

        return False

    def is_party(self, identity: Identity | None, *owner_ids: Any) -> bool:
        """True when the identity's profile is one of the given owners."""
        if identity is None or identity.profile_id is None:
            return False
        return any(str(owner) == identity.profile_id for owner in owner_ids if owner)

    def can_manage(self, identity: Identity | None, action: str, *owner_ids: Any) -> bool:
        if identity is not None and identity.is_admin:
            return True
        return self.is_party(identity, *owner_ids) and self.check_permission(identity, action)

    def can_view_admin(self, identity: Identity | None) -> bool:
        return identity is not None and identity.is_admin
