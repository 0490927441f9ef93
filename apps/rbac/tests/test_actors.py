import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIRequestFactory

from apps.accounts.models import Admin, Customer, Member
from apps.companies.models import Company
from apps.rbac.actors import (
    AdminActor,
    CustomerActor,
    MemberActor,
    actor_for_user,
    is_staff_actor,
)
from apps.rbac.permissions import roles_required, user_roles


@pytest.fixture
def company(db):
    return Company.objects.create(name="森の家工務店")


def _user(username, **extra):
    return get_user_model().objects.create_user(username=username, password="pass12345!", **extra)


@pytest.mark.django_db
def test_admin_profile_resolves_to_admin():
    user = _user("unei")
    Admin.objects.create(user=user, name="運営 鈴木")
    actor = actor_for_user(user)
    assert actor == AdminActor(user_id=user.pk, name="運営 鈴木")
    assert is_staff_actor(actor)


@pytest.mark.django_db
def test_member_profile_carries_company(company):
    user = _user("tanaka")
    member = Member.objects.create(user=user, company=company, name="田中")
    actor = actor_for_user(user)
    assert isinstance(actor, MemberActor)
    assert (actor.member_id, actor.company_id, actor.name) == (member.pk, company.pk, "田中")


@pytest.mark.django_db
def test_inactive_member_has_no_role(company):
    user = _user("retired")
    Member.objects.create(user=user, company=company, name="退職者", is_active=False)
    assert actor_for_user(user) is None
    assert user_roles(user) == set()


@pytest.mark.django_db
def test_customer_profile_carries_contact_details():
    user = _user("sato@example.com", email="sato@example.com")
    customer = Customer.objects.create(user=user, last_name="佐藤", first_name="花子", phone_number="080-1111-2222")
    actor = actor_for_user(user)
    assert actor == CustomerActor(
        user_id=user.pk,
        customer_id=customer.pk,
        name="佐藤 花子",
        email="sato@example.com",
        phone="080-1111-2222",
    )
    assert not is_staff_actor(actor)


@pytest.mark.django_db
def test_superuser_without_profile_acts_as_admin():
    user = get_user_model().objects.create_superuser(username="root", email="root@example.com", password="x")
    assert isinstance(actor_for_user(user), AdminActor)


@pytest.mark.django_db
def test_plain_user_and_anonymous_have_no_actor():
    from django.contrib.auth.models import AnonymousUser

    assert actor_for_user(_user("plain")) is None
    assert actor_for_user(AnonymousUser()) is None


@pytest.mark.django_db
def test_roles_required_matches_exact_role(company):
    user = _user("unei")
    Admin.objects.create(user=user, name="運営")
    request = APIRequestFactory().get("/")
    request.user = user

    assert roles_required("Admin")().has_permission(request, None)
    # admins do not pass the member console
    assert not roles_required("member")().has_permission(request, None)
