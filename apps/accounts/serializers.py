from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from apps.rbac.actors import CustomerActor, MemberActor, actor_for_user

from .models import User


class CurrentUserSerializer(serializers.ModelSerializer):
    """The logged-in user plus the role they act as."""
    role = serializers.SerializerMethodField()
    company_id = serializers.SerializerMethodField()
    customer_id = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "username", "email", "display_name", "role", "company_id", "customer_id")

    def _actor(self, obj):
        # resolved once per serialization; three method fields read it
        if not hasattr(self, "_cached_actor"):
            self._cached_actor = actor_for_user(obj)
        return self._cached_actor

    def get_role(self, obj) -> str | None:
        actor = self._actor(obj)
        return actor.role if actor else None

    def get_company_id(self, obj) -> int | None:
        actor = self._actor(obj)
        return actor.company_id if isinstance(actor, MemberActor) else None

    def get_customer_id(self, obj) -> int | None:
        actor = self._actor(obj)
        return actor.customer_id if isinstance(actor, CustomerActor) else None


class CustomerSignupSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(write_only=True, min_length=8, style={"input_type": "password"})
    last_name = serializers.CharField(max_length=100)
    first_name = serializers.CharField(max_length=100)
    phone_number = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    # where the client goes after sign-up, e.g. /inquiry?companyId=7
    redirect = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        U = get_user_model()
        if U.objects.filter(email__iexact=value).exists() or U.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return value

    def validate_password(self, value: str) -> str:
        validate_password(value)
        return value
