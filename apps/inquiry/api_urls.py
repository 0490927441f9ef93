from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .api import (
    AdminCompanyInquiryViewSet,
    AdminGeneralInquiryViewSet,
    CustomerInquiryViewSet,
    InquiryFormView,
    InquirySubmitView,
    MemberInquiryViewSet,
)

app_name = "inquiry_api"

router = DefaultRouter()
router.register(r"admin/general-inquiries", AdminGeneralInquiryViewSet, basename="admin-general-inquiry")
router.register(r"admin/company-inquiries", AdminCompanyInquiryViewSet, basename="admin-company-inquiry")
router.register(r"member/inquiries", MemberInquiryViewSet, basename="member-inquiry")
router.register(r"customer/inquiries", CustomerInquiryViewSet, basename="customer-inquiry")

urlpatterns = [
    path("inquiries/", InquirySubmitView.as_view(), name="inquiry-submit"),
    path("inquiries/form/", InquiryFormView.as_view(), name="inquiry-form"),
    path("", include(router.urls)),
]
