# apps/accounts/api.py
from urllib.parse import parse_qs, urlsplit

from django.contrib.auth import get_user_model, login
from django.db import transaction
from django.utils.http import url_has_allowed_host_and_scheme

from rest_framework import serializers, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from drf_spectacular.utils import extend_schema, inline_serializer, OpenApiExample

from apps.audit.utils import log_event
from apps.inquiry.services import prefill_for
from apps.rbac.actors import actor_for_user

from .models import Customer
from .serializers import CurrentUserSerializer, CustomerSignupSerializer

DEFAULT_SIGNUP_REDIRECT = "/customer"


def safe_redirect(request, target: str) -> str:
    """Only same-site relative destinations survive; anything else goes to the customer home."""
    target = (target or "").strip()
    if target and url_has_allowed_host_and_scheme(
        target, allowed_hosts={request.get_host()}, require_https=request.is_secure()
    ):
        return target
    return DEFAULT_SIGNUP_REDIRECT


def _targets_company(redirect: str) -> bool:
    query = parse_qs(urlsplit(redirect).query)
    return bool(query.get("companyId") or query.get("company_id"))


@extend_schema(
    summary="Who am I",
    description="I return the current user and the role they act as. Anonymous callers get `is_authenticated=false`.",
    responses={
        200: inline_serializer(
            name="WhoAmI",
            fields={
                "is_authenticated": serializers.BooleanField(),
                "user": CurrentUserSerializer(required=False),
            },
        )
    },
)
class WhoAmIView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        if not request.user.is_authenticated:
            return Response({"is_authenticated": False})
        return Response({"is_authenticated": True, "user": CurrentUserSerializer(request.user).data})


@extend_schema(
    summary="Customer sign-up",
    description=(
        "I create a customer account, start a session and return JWT tokens. "
        "`redirect` (e.g. `/inquiry?companyId=7`) is echoed back if it is same-site, "
        "together with the inquiry form prefill for that destination."
    ),
    request=CustomerSignupSerializer,
    responses={201: inline_serializer(
        name="CustomerSignupResult",
        fields={
            "user": CurrentUserSerializer(),
            "access": serializers.CharField(),
            "refresh": serializers.CharField(),
            "redirect": serializers.CharField(),
            "prefill": serializers.DictField(),
        },
    )},
    examples=[
        OpenApiExample(
            "Sign up from a company inquiry form",
            value={
                "email": "sato@example.com",
                "password": "Sumai-Kentou-2024",
                "last_name": "佐藤",
                "first_name": "花子",
                "phone_number": "080-1111-2222",
                "redirect": "/inquiry?companyId=7",
            },
        )
    ],
)
class CustomerSignupView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []  # no session yet, so no CSRF check

    def post(self, request):
        ser = CustomerSignupSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data

        U = get_user_model()
        with transaction.atomic():
            user = U.objects.create_user(
                username=vd["email"],
                email=vd["email"],
                password=vd["password"],
                first_name=vd["first_name"],
                last_name=vd["last_name"],
            )
            customer = Customer.objects.create(
                user=user,
                last_name=vd["last_name"],
                first_name=vd["first_name"],
                phone_number=vd["phone_number"].strip(),
            )

        login(request, user, backend="django.contrib.auth.backends.ModelBackend")
        log_event(request, "customer.signup", "Customer", customer.pk)

        redirect = safe_redirect(request, vd["redirect"])
        prefill = prefill_for(actor_for_user(user), company_directed=_targets_company(redirect))
        refresh = RefreshToken.for_user(user)
        return Response(
            {
                "user": CurrentUserSerializer(user).data,
                "access": str(refresh.access_token),
                "refresh": str(refresh),
                "redirect": redirect,
                "prefill": prefill.as_dict(),
            },
            status=status.HTTP_201_CREATED,
        )
