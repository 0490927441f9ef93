import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.accounts.models import Admin, Customer, Member
from apps.companies.models import Company, ConstructionCase
from apps.rbac.actors import actor_for_user


@pytest.fixture
def make_user(db):
    U = get_user_model()

    def _make(username, email="", **extra):
        return U.objects.create_user(username=username, email=email, password="pass12345!", **extra)

    return _make


@pytest.fixture
def company_a(db):
    # id 7 matches the public form link used in the sign-up flow
    return Company.objects.create(id=7, name="森の家工務店", email="info@mori.example", is_published=True)


@pytest.fixture
def company_b(db):
    return Company.objects.create(name="海辺ホーム", email="contact@umibe.example", is_published=True)


@pytest.fixture
def case_a(company_a):
    return ConstructionCase.objects.create(company=company_a, title="木の香りの平屋")


@pytest.fixture
def admin_user(make_user):
    user = make_user("unei", "unei@koumuten-match.local")
    Admin.objects.create(user=user, name="運営 鈴木")
    return user


@pytest.fixture
def member_a_user(make_user, company_a):
    user = make_user("tanaka", "tanaka@mori.example")
    Member.objects.create(user=user, company=company_a, name="田中")
    return user


@pytest.fixture
def member_b_user(make_user, company_b):
    user = make_user("kato", "kato@umibe.example")
    Member.objects.create(user=user, company=company_b, name="加藤")
    return user


@pytest.fixture
def customer_user(make_user):
    user = make_user("sato@example.com", "sato@example.com")
    Customer.objects.create(user=user, last_name="佐藤", first_name="花子", phone_number="080-1111-2222")
    return user


@pytest.fixture
def other_customer_user(make_user):
    user = make_user("ito@example.com", "ito@example.com")
    Customer.objects.create(user=user, last_name="伊藤", first_name="健")
    return user


@pytest.fixture
def admin(admin_user):
    return actor_for_user(admin_user)


@pytest.fixture
def member_a(member_a_user):
    return actor_for_user(member_a_user)


@pytest.fixture
def member_b(member_b_user):
    return actor_for_user(member_b_user)


@pytest.fixture
def customer(customer_user):
    return actor_for_user(customer_user)


@pytest.fixture
def other_customer(other_customer_user):
    return actor_for_user(other_customer_user)


@pytest.fixture
def api():
    return APIClient()


@pytest.fixture
def client_for(api):
    def _as(user):
        api.force_authenticate(user)
        return api

    return _as
