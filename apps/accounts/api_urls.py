from django.urls import path
from .api import CustomerSignupView, WhoAmIView

app_name = "accounts_api"

urlpatterns = [
    path("accounts/whoami/", WhoAmIView.as_view(), name="whoami"),
    path("accounts/signup/", CustomerSignupView.as_view(), name="signup"),
]
