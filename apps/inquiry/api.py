# apps/inquiry/api.py
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import (
    extend_schema,
    extend_schema_view,
    OpenApiParameter,
)
from drf_spectacular.types import OpenApiTypes

from apps.audit.utils import log_event
from apps.rbac.actors import actor_for_user
from apps.rbac.permissions import roles_required

from . import services
from .models import Inquiry
from .serializers import (
    CaseSummarySerializer,
    CompanySummarySerializer,
    CustomerInquirySerializer,
    InquiryCreatedSerializer,
    InquiryResponseSerializer,
    InquirySubmitSerializer,
    InquiryUpdateSerializer,
    ReplySerializer,
    StaffInquirySerializer,
    StatusSummarySerializer,
)
from .schemas import (
    DomainErrorResponse,
    InquiryFormResponse,
    ReplyCreatedResponse,
    ReplyExample,
    SignupRequiredResponse,
    StatusUpdateExample,
    SubmitCompanyInquiryExample,
    SubmitGeneralInquiryExample,
)


def _signup_required(company_id, case_id=None) -> Response:
    return Response(
        {
            "detail": "Sign up or log in as a customer to contact this company.",
            "signup_url": services.signup_redirect_url(company_id=company_id, case_id=case_id),
        },
        status=status.HTTP_401_UNAUTHORIZED,
    )


def _query_id(request, camel: str, snake: str):
    # the public form links use camelCase (?companyId=7&caseId=3)
    return request.query_params.get(camel) or request.query_params.get(snake)


# ---------------------------------------------------------------------------
# Public submission
# ---------------------------------------------------------------------------

class InquirySubmitView(APIView):
    """
    I accept inquiries from the public form.

    General inquiries are open to anyone. Company-directed ones need a
    customer login; anonymous callers get a 401 with a sign-up link that
    returns them to the same form.
    """
    schema_tags = ["Inquiries"]
    permission_classes = [AllowAny]
    audit_object_type = "Inquiry"

    @extend_schema(
        summary="Submit an inquiry",
        description=(
            "Without `company_id` the inquiry goes to the platform operator. "
            "With `company_id` (and optionally `case_id`) the caller must be a customer; "
            "requester fields are then taken from the profile. Emits `inquiry.create` audit."
        ),
        request=InquirySubmitSerializer,
        examples=[SubmitGeneralInquiryExample, SubmitCompanyInquiryExample],
        responses={
            201: InquiryCreatedSerializer,
            400: DomainErrorResponse,
            401: SignupRequiredResponse,
            403: DomainErrorResponse,
        },
    )
    def post(self, request):
        ser = InquirySubmitSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data

        company, case = services.resolve_target(vd["company_id"], vd["case_id"])
        if company is not None and not request.user.is_authenticated:
            return _signup_required(company.id, case.id if case else None)

        inquiry = services.submit_inquiry(actor=actor_for_user(request.user), **vd)
        log_event(request, "inquiry.create", "Inquiry", inquiry.id)
        return Response(InquiryCreatedSerializer(inquiry).data, status=status.HTTP_201_CREATED)


class InquiryFormView(APIView):
    """Context for rendering the inquiry form: target company/case and prefill."""
    schema_tags = ["Inquiries"]
    permission_classes = [AllowAny]

    @extend_schema(
        summary="Inquiry form context",
        parameters=[
            OpenApiParameter(name="companyId", required=False, type=OpenApiTypes.INT),
            OpenApiParameter(name="caseId", required=False, type=OpenApiTypes.INT),
        ],
        responses={200: InquiryFormResponse, 400: DomainErrorResponse, 401: SignupRequiredResponse},
    )
    def get(self, request):
        company_id = _query_id(request, "companyId", "company_id")
        case_id = _query_id(request, "caseId", "case_id")

        company, case = services.resolve_target(company_id, case_id)
        if company is not None and not request.user.is_authenticated:
            return _signup_required(company.id, case.id if case else None)

        prefill = services.prefill_for(
            actor_for_user(request.user), company_directed=company is not None
        )
        return Response(
            {
                "company": CompanySummarySerializer(company).data if company else None,
                "case": CaseSummarySerializer(case).data if case else None,
                "prefill": prefill.as_dict(),
            }
        )


# ---------------------------------------------------------------------------
# Consoles
# ---------------------------------------------------------------------------

class _InquiryConsoleBase(viewsets.GenericViewSet):
    """
    Shared list/detail/reply/stats for one console.

    Scope and ownership come from services; a console only says which
    actor it expects (permission_classes) and, for the admin consoles,
    which kind of inquiry it shows.
    """
    schema_tags = ["Inquiries"]
    audit_object_type = "Inquiry"
    inquiry_kind = None
    staff_view = True

    def get_actor(self):
        return actor_for_user(self.request.user)

    def get_serializer_class(self):
        return StaffInquirySerializer if self.staff_view else CustomerInquirySerializer

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Inquiry.objects.none()
        return services.list_inquiries(
            self.get_actor(),
            status=self.request.query_params.get("status"),
            kind=self.inquiry_kind,
        )

    def _check_kind(self, actor, pk):
        # the admin consoles only act on their own kind of inquiry
        if self.inquiry_kind is not None:
            services.get_inquiry(actor, pk, kind=self.inquiry_kind)

    def _detail(self, actor, pk):
        inquiry = services.get_inquiry(actor, pk, kind=self.inquiry_kind)
        return self.get_serializer(inquiry).data

    def list(self, request, *args, **kwargs):
        qs = self.get_queryset()
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)

    def retrieve(self, request, pk=None, *args, **kwargs):
        data = self._detail(self.get_actor(), pk)
        log_event(request, "inquiry.view", "Inquiry", pk)
        return Response(data)

    @extend_schema(
        methods=["POST"],
        summary="Reply on the thread",
        description="Appends one message as the caller's role. Emits `inquiry.reply` audit.",
        request=ReplySerializer,
        examples=[ReplyExample],
        responses={201: ReplyCreatedResponse, 400: DomainErrorResponse, 403: DomainErrorResponse, 404: DomainErrorResponse},
    )
    @action(detail=True, methods=["post"], url_path="reply")
    def reply(self, request, pk=None):
        actor = self.get_actor()
        ser = ReplySerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        self._check_kind(actor, pk)
        response = services.append_response(
            actor, pk, ser.validated_data["message"], sender=ser.validated_data.get("sender")
        )
        log_event(request, "inquiry.reply", "Inquiry", pk)
        return Response(
            {
                "response": InquiryResponseSerializer(response).data,
                "inquiry": self._detail(actor, pk),
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        methods=["GET"],
        summary="Status counts for this console",
        responses={200: StatusSummarySerializer},
    )
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        summary = services.status_summary(self.get_actor(), kind=self.inquiry_kind)
        return Response(StatusSummarySerializer(summary).data)


class _StaffInquiryConsole(_InquiryConsoleBase):
    """Adds the staff edit: status and internal notes."""

    @extend_schema(
        summary="Update status and/or internal notes",
        description="Setting the current status again is a no-op. Emits `inquiry.update` audit.",
        request=InquiryUpdateSerializer,
        examples=[StatusUpdateExample],
        responses={200: StaffInquirySerializer, 400: DomainErrorResponse, 403: DomainErrorResponse, 404: DomainErrorResponse},
    )
    def partial_update(self, request, pk=None, *args, **kwargs):
        actor = self.get_actor()
        ser = InquiryUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        self._check_kind(actor, pk)
        services.apply_staff_update(actor, pk, **ser.validated_data)
        log_event(request, "inquiry.update", "Inquiry", pk)
        return Response(self._detail(actor, pk))


_LIST_PARAMETERS = [
    OpenApiParameter(
        name="status",
        description="NEW | IN_PROGRESS | RESOLVED | CLOSED, or `all`",
        required=False,
        type=OpenApiTypes.STR,
    ),
    OpenApiParameter(name="limit", required=False, type=OpenApiTypes.INT),
    OpenApiParameter(name="offset", required=False, type=OpenApiTypes.INT),
]


@extend_schema_view(
    list=extend_schema(summary="List general inquiries (admin)", parameters=_LIST_PARAMETERS),
    retrieve=extend_schema(summary="Get general inquiry (admin)", description="Emits `inquiry.view` audit."),
)
class AdminGeneralInquiryViewSet(_StaffInquiryConsole):
    """Inquiries addressed to the platform operator."""
    permission_classes = [IsAuthenticated, roles_required("admin")]
    inquiry_kind = services.GENERAL


@extend_schema_view(
    list=extend_schema(summary="List company inquiries (admin)", parameters=_LIST_PARAMETERS),
    retrieve=extend_schema(summary="Get company inquiry (admin)", description="Emits `inquiry.view` audit."),
)
class AdminCompanyInquiryViewSet(_StaffInquiryConsole):
    """Inquiries addressed to any company, across the marketplace."""
    permission_classes = [IsAuthenticated, roles_required("admin")]
    inquiry_kind = services.COMPANY


@extend_schema_view(
    list=extend_schema(summary="List my company's inquiries", parameters=_LIST_PARAMETERS),
    retrieve=extend_schema(summary="Get inquiry (member)", description="Emits `inquiry.view` audit."),
)
class MemberInquiryViewSet(_StaffInquiryConsole):
    permission_classes = [IsAuthenticated, roles_required("member")]


@extend_schema_view(
    list=extend_schema(summary="List my inquiries", parameters=_LIST_PARAMETERS),
    retrieve=extend_schema(summary="Get my inquiry", description="Never includes internal notes."),
)
class CustomerInquiryViewSet(_InquiryConsoleBase):
    """Read and reply only: customers cannot change status or notes."""
    permission_classes = [IsAuthenticated, roles_required("customer")]
    staff_view = False
