# apps/rbac/permissions.py
from typing import Iterable, Set

from rest_framework.permissions import BasePermission

from .actors import actor_for_user


def _norm(s: str) -> str:
    """Normalize role names for reliable comparisons."""
    return (s or "").strip().lower()


def user_roles(user) -> Set[str]:
    """Role names the user can act as (empty for anonymous/profile-less users)."""
    actor = actor_for_user(user)
    return {actor.role} if actor else set()


class HasRole(BasePermission):
    """
    Gate an endpoint by role names. Subclasses (or the roles_required()
    factory below) set `required_roles`.

    Behavior:
    - Each console requires its own role; admins do not pass member or
      customer consoles, because those scope data by the caller's company
      or customer id.
    - Superusers without a profile resolve to the admin role.
    - Role matching is case-insensitive.
    """

    message = "You do not have permission to perform this action."
    required_roles: Set[str] = set()

    def has_permission(self, request, view) -> bool:
        # No roles configured → allow (useful for composing with other perms).
        if not self.required_roles:
            return True

        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False

        return bool(user_roles(user) & self.required_roles)

    def has_object_permission(self, request, view, obj) -> bool:
        # ownership is checked by the inquiry services per call
        return self.has_permission(request, view)


def roles_required(*roles: Iterable[str]):
    """
    Return a concrete DRF permission class that requires ANY of the given roles.

    Usage:
        permission_classes = [IsAuthenticated, roles_required("member")]
    """
    required = {_norm(r) for r in roles if isinstance(r, str) and r.strip()}

    class RolesRequired(HasRole):
        required_roles = required

    return RolesRequired
