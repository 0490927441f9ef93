# apps/accounts/admin.py
from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import Admin, Customer, Member, User


# -------------------------
# Role profile inlines
# -------------------------
class AdminInline(admin.StackedInline):
    model = Admin
    can_delete = False
    extra = 0
    fk_name = "user"


class MemberInline(admin.StackedInline):
    model = Member
    can_delete = False
    extra = 0
    fk_name = "user"


class CustomerInline(admin.StackedInline):
    model = Customer
    can_delete = False
    extra = 0
    fk_name = "user"


# -------------------------
# Custom User admin (single registration)
# -------------------------
@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    """
    Custom admin for AUTH_USER_MODEL:
    - Keep Django auth features
    - Add display_name
    - Show which role profile the user acts through
    """
    list_display = ("id", "username", "email", "display_name", "role", "is_active")
    search_fields = ("username", "email", "first_name", "last_name", "display_name")
    ordering = ("id",)

    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (_("Personal info"), {"fields": ("first_name", "last_name", "email", "display_name")}),
        (_("Permissions"), {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("username", "password1", "password2", "email", "display_name"),
        }),
    )

    inlines = [AdminInline, MemberInline, CustomerInline]

    def role(self, obj: User):
        from apps.rbac.actors import actor_for_user

        actor = actor_for_user(obj)
        return actor.role if actor else "-"
    role.short_description = "Role"


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "company", "user", "is_active", "created_at")
    list_filter = ("is_active", "company")
    search_fields = ("name", "user__email", "company__name")


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("id", "last_name", "first_name", "user", "phone_number", "created_at")
    search_fields = ("last_name", "first_name", "user__email", "phone_number")
    # Deleting a customer removes their inquiries with it.
    readonly_fields = ("created_at", "updated_at")
