from __future__ import annotations

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Project user model.
    - display_name: lightweight label you can show in UI
    A user acts through exactly one role profile below (Admin, Member or
    Customer); see apps.rbac.actors.actor_for_user.
    """
    display_name = models.CharField(max_length=150, blank=True, default="")

    def __str__(self) -> str:  # type: ignore[override]
        return self.display_name or self.get_full_name() or self.username


class Admin(models.Model):
    """Platform operator staff."""
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="admin_profile",
    )
    name = models.CharField(max_length=120)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Admin({self.name})"


class Member(models.Model):
    """Staff of one company (工務店担当者)."""
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="member_profile",
    )
    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.CASCADE,
        related_name="members",
    )
    name = models.CharField(max_length=120)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["company_id", "name", "id"]

    def __str__(self) -> str:
        return f"{self.name} ({self.company})"


class Customer(models.Model):
    """Prospective homeowner. Email lives on the user."""
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="customer_profile",
    )
    last_name = models.CharField(max_length=100, blank=True, default="")
    first_name = models.CharField(max_length=100, blank=True, default="")
    phone_number = models.CharField(max_length=50, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def full_name(self) -> str:
        # family name first, as written in Japanese
        return f"{self.last_name} {self.first_name}".strip()

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    def __str__(self) -> str:
        return self.display_name
