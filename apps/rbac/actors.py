# apps/rbac/actors.py
"""
The closed set of roles a caller can act as.

Every inquiry service call takes one of these explicitly; nothing reads
the current user from ambient state. Code that branches on the actor
checks the three variants with isinstance and raises TypeError on
anything else, so adding a fourth role fails loudly at every boundary.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Union

ADMIN = "admin"
MEMBER = "member"
CUSTOMER = "customer"


@dataclass(frozen=True)
class AdminActor:
    user_id: int
    name: str
    role: ClassVar[str] = ADMIN


@dataclass(frozen=True)
class MemberActor:
    user_id: int
    member_id: int
    company_id: int
    name: str
    role: ClassVar[str] = MEMBER


@dataclass(frozen=True)
class CustomerActor:
    user_id: int
    customer_id: int
    name: str
    email: str = ""
    phone: str = ""
    role: ClassVar[str] = CUSTOMER


Actor = Union[AdminActor, MemberActor, CustomerActor]
STAFF_ACTORS = (AdminActor, MemberActor)


def is_staff_actor(actor) -> bool:
    return isinstance(actor, STAFF_ACTORS)


def unknown_actor(actor) -> TypeError:
    return TypeError(f"Unsupported actor type: {type(actor).__name__}")


def _display(user) -> str:
    return (
        getattr(user, "display_name", "")
        or user.get_full_name()
        or user.get_username()
    )


def actor_for_user(user) -> Optional[Actor]:
    """
    Resolve an authenticated user to their role.

    Lookup order is admin profile, member profile, customer profile;
    superusers without a profile act as admin. Inactive members resolve
    to nothing. Anonymous users and users without a profile get None.
    """
    if not getattr(user, "is_authenticated", False):
        return None

    admin = getattr(user, "admin_profile", None)
    if admin is not None:
        return AdminActor(user_id=user.pk, name=admin.name or _display(user))

    member = getattr(user, "member_profile", None)
    if member is not None:
        if not member.is_active:
            return None
        return MemberActor(
            user_id=user.pk,
            member_id=member.pk,
            company_id=member.company_id,
            name=member.name or _display(user),
        )

    customer = getattr(user, "customer_profile", None)
    if customer is not None:
        return CustomerActor(
            user_id=user.pk,
            customer_id=customer.pk,
            name=customer.display_name,
            email=user.email or "",
            phone=customer.phone_number or "",
        )

    if getattr(user, "is_superuser", False):
        return AdminActor(user_id=user.pk, name=_display(user))
    return None
