import pytest
from django.urls import reverse
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.accounts.models import Customer, Member
from apps.companies.models import Company


@pytest.mark.django_db
def test_jwt_login_and_whoami_reports_member_role():
    # a company member we can log in with
    U = get_user_model()
    company = Company.objects.create(name="森の家工務店", email="info@mori.example")
    user = U.objects.create_user(username="tanaka", email="tanaka@mori.example", password="pass12345!")
    Member.objects.create(user=user, company=company, name="田中")

    client = APIClient()

    # 1) obtain token
    res = client.post(reverse("token_obtain_pair"), {"username": "tanaka", "password": "pass12345!"}, format="json")
    assert res.status_code == 200, res.content
    access = res.json()["access"]

    # 2) use Bearer token to ask who we are
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    r2 = client.get(reverse("accounts_api:whoami"))
    assert r2.status_code == 200, r2.content
    body = r2.json()
    assert body["is_authenticated"] is True
    assert body["user"]["username"] == "tanaka"
    assert body["user"]["role"] == "member"
    assert body["user"]["company_id"] == company.id
    assert body["user"]["customer_id"] is None


@pytest.mark.django_db
def test_whoami_anonymous():
    r = APIClient().get(reverse("accounts_api:whoami"))
    assert r.status_code == 200
    assert r.json() == {"is_authenticated": False}


@pytest.mark.django_db
def test_whoami_user_without_profile_has_no_role():
    U = get_user_model()
    user = U.objects.create_user(username="plain", password="pass12345!")
    client = APIClient()
    client.force_authenticate(user)
    body = client.get(reverse("accounts_api:whoami")).json()
    assert body["user"]["role"] is None


@pytest.mark.django_db
def test_whoami_customer_role():
    U = get_user_model()
    user = U.objects.create_user(username="sato@example.com", email="sato@example.com", password="pass12345!")
    customer = Customer.objects.create(user=user, last_name="佐藤", first_name="花子")
    client = APIClient()
    client.force_authenticate(user)
    body = client.get(reverse("accounts_api:whoami")).json()
    assert body["user"]["role"] == "customer"
    assert body["user"]["customer_id"] == customer.id
