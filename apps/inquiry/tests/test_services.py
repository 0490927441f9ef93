from datetime import timedelta

import pytest
from django.utils import timezone

from apps.companies.models import Company, ConstructionCase
from apps.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from apps.inquiry import services
from apps.inquiry.models import Inquiry, InquiryResponse, InquiryStatus, ResponseSender


def _general(**overrides):
    data = {
        "inquirer_name": "山田太郎",
        "inquirer_email": "yamada@example.com",
        "message": "見積もりをお願いします",
    }
    data.update(overrides)
    return services.submit_inquiry(**data)


@pytest.fixture
def inquiry_a(customer, company_a):
    return services.submit_inquiry(actor=customer, company_id=company_a.id, message="見学会はありますか？")


@pytest.fixture
def inquiry_b(customer, company_b):
    return services.submit_inquiry(actor=customer, company_id=company_b.id, message="資料をください")


# ---- submit ----

@pytest.mark.django_db
def test_submit_general_anonymous_starts_new():
    inquiry = _general(inquirer_email="  Yamada@Example.COM ")
    assert inquiry.status == InquiryStatus.NEW
    assert inquiry.responded_at is None
    assert inquiry.company_id is None
    assert inquiry.customer_id is None
    assert inquiry.inquirer_email == "yamada@example.com"
    assert inquiry.is_general


@pytest.mark.django_db
@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"message": "   "}, "message"),
        ({"inquirer_name": ""}, "inquirer_name"),
        ({"inquirer_email": ""}, "inquirer_email"),
        ({"inquirer_email": "not-an-email"}, "inquirer_email"),
    ],
)
def test_submit_rejects_missing_or_malformed_fields(overrides, field):
    with pytest.raises(ValidationError) as err:
        _general(**overrides)
    assert err.value.field == field
    assert not Inquiry.objects.exists()


@pytest.mark.django_db
def test_submit_unknown_company_is_validation_error():
    with pytest.raises(ValidationError) as err:
        _general(company_id=9999)
    assert err.value.field == "company_id"


@pytest.mark.django_db
def test_company_directed_requires_customer(company_a, admin, member_a):
    with pytest.raises(AuthorizationError):
        _general(company_id=company_a.id)
    for staff in (admin, member_a):
        with pytest.raises(AuthorizationError):
            _general(company_id=company_a.id, actor=staff)
    assert not Inquiry.objects.exists()


@pytest.mark.django_db
def test_company_directed_takes_requester_fields_from_profile(customer, company_a, case_a):
    inquiry = services.submit_inquiry(
        actor=customer,
        company_id=company_a.id,
        case_id=case_a.id,
        inquirer_name="別名",
        inquirer_email="other@example.com",
        message="平屋を検討しています",
    )
    assert inquiry.company_id == company_a.id
    assert inquiry.case_id == case_a.id
    assert inquiry.customer_id == customer.customer_id
    assert inquiry.inquirer_name == "佐藤 花子"
    assert inquiry.inquirer_email == "sato@example.com"
    assert inquiry.inquirer_phone == "080-1111-2222"


@pytest.mark.django_db
def test_case_must_belong_to_company(customer, company_b, case_a):
    with pytest.raises(ValidationError) as err:
        services.submit_inquiry(actor=customer, company_id=company_b.id, case_id=case_a.id, message="x")
    assert err.value.field == "case_id"

    with pytest.raises(ValidationError):
        services.submit_inquiry(actor=customer, case_id=case_a.id, message="x")


@pytest.mark.django_db
def test_unpublished_company_and_draft_case_still_take_inquiries(customer):
    hidden = Company.objects.create(name="準備中ホーム", email="hello@junbi.example")
    draft = ConstructionCase.objects.create(company=hidden, title="下書きの事例")
    assert not hidden.is_published
    assert draft.status == ConstructionCase.Status.DRAFT

    inquiry = services.submit_inquiry(actor=customer, company_id=hidden.id, case_id=draft.id, message="x")
    assert (inquiry.company, inquiry.case) == (hidden, draft)


@pytest.mark.django_db
def test_general_inquiry_by_customer_prefills_email_only(customer):
    inquiry = services.submit_inquiry(actor=customer, inquirer_name="佐藤", message="サイトについて")
    assert inquiry.company_id is None
    assert inquiry.customer_id == customer.customer_id
    assert inquiry.inquirer_email == "sato@example.com"
    assert inquiry.inquirer_phone == ""

    with pytest.raises(ValidationError) as err:
        services.submit_inquiry(actor=customer, message="名前なし")
    assert err.value.field == "inquirer_name"


@pytest.mark.django_db
def test_prefill_rules(customer, admin):
    assert services.prefill_for(None, company_directed=True) == services.InquiryPrefill()
    assert services.prefill_for(admin, company_directed=True) == services.InquiryPrefill()

    locked = services.prefill_for(customer, company_directed=True)
    assert (locked.name, locked.email, locked.phone, locked.locked) == (
        "佐藤 花子", "sato@example.com", "080-1111-2222", True,
    )
    general = services.prefill_for(customer, company_directed=False)
    assert general.as_dict() == {"name": "", "email": "sato@example.com", "phone": "", "locked": False}


def test_signup_redirect_preserves_form_target():
    url = services.signup_redirect_url(company_id=7, case_id=3)
    assert url == "/signup?redirect=%2Finquiry%3FcompanyId%3D7%26caseId%3D3"
    assert services.signup_redirect_url(company_id=7) == "/signup?redirect=%2Finquiry%3FcompanyId%3D7"


# ---- scoping ----

@pytest.mark.django_db
def test_list_scopes(admin, member_a, member_b, customer, other_customer, inquiry_a, inquiry_b):
    general = _general()
    mine = services.submit_inquiry(actor=other_customer, inquirer_name="伊藤", message="質問です")

    assert set(services.list_inquiries(admin)) == {general, mine, inquiry_a, inquiry_b}
    assert set(services.list_inquiries(admin, kind=services.GENERAL)) == {general, mine}
    assert set(services.list_inquiries(admin, kind=services.COMPANY)) == {inquiry_a, inquiry_b}
    assert list(services.list_inquiries(member_a)) == [inquiry_a]
    assert list(services.list_inquiries(member_b)) == [inquiry_b]
    assert set(services.list_inquiries(customer)) == {inquiry_a, inquiry_b}
    assert list(services.list_inquiries(other_customer)) == [mine]


@pytest.mark.django_db
def test_list_newest_first_and_status_filter(admin):
    first = _general()
    second = _general(message="二件目")
    services.update_status(admin, first.id, InquiryStatus.RESOLVED)

    assert list(services.list_inquiries(admin)) == [second, first]
    assert list(services.list_inquiries(admin, status="RESOLVED")) == [first]
    assert list(services.list_inquiries(admin, status="all")) == [second, first]
    with pytest.raises(ValidationError):
        list(services.list_inquiries(admin, status="resolved"))


@pytest.mark.django_db
def test_get_inquiry_out_of_scope_is_not_found(member_b, other_customer, admin, inquiry_a):
    with pytest.raises(NotFoundError):
        services.get_inquiry(member_b, inquiry_a.id)
    with pytest.raises(NotFoundError):
        services.get_inquiry(other_customer, inquiry_a.id)
    with pytest.raises(NotFoundError):
        services.get_inquiry(admin, inquiry_a.id, kind=services.GENERAL)
    with pytest.raises(NotFoundError):
        services.get_inquiry(admin, 123456)
    assert services.get_inquiry(admin, inquiry_a.id, kind=services.COMPANY) == inquiry_a


@pytest.mark.django_db
def test_unknown_actor_is_a_type_error():
    with pytest.raises(TypeError):
        services.list_inquiries(object())


# ---- status & notes ----

@pytest.mark.django_db
def test_update_status_is_idempotent(member_a, inquiry_a):
    services.update_status(member_a, inquiry_a.id, "IN_PROGRESS")
    stamp = Inquiry.objects.get(pk=inquiry_a.pk).updated_at

    again = services.update_status(member_a, inquiry_a.id, "IN_PROGRESS")
    assert again.status == InquiryStatus.IN_PROGRESS
    assert Inquiry.objects.get(pk=inquiry_a.pk).updated_at == stamp


@pytest.mark.django_db
def test_status_is_permissive(admin, inquiry_a):
    for state in ("CLOSED", "NEW", "RESOLVED", "IN_PROGRESS"):
        assert services.update_status(admin, inquiry_a.id, state).status == state


@pytest.mark.django_db
def test_unknown_status_rejected(admin, inquiry_a):
    with pytest.raises(ValidationError) as err:
        services.update_status(admin, inquiry_a.id, "DONE")
    assert err.value.field == "status"


@pytest.mark.django_db
def test_member_cannot_touch_other_company(member_b, inquiry_a):
    with pytest.raises(AuthorizationError):
        services.update_status(member_b, inquiry_a.id, "CLOSED")
    with pytest.raises(AuthorizationError):
        services.update_notes(member_b, inquiry_a.id, "x")
    with pytest.raises(AuthorizationError):
        services.append_response(member_b, inquiry_a.id, "他社です")
    inquiry_a.refresh_from_db()
    assert inquiry_a.status == InquiryStatus.NEW
    assert not inquiry_a.responses.exists()


@pytest.mark.django_db
def test_member_cannot_touch_general_inquiry(member_a):
    general = _general()
    with pytest.raises(AuthorizationError):
        services.update_status(member_a, general.id, "CLOSED")


@pytest.mark.django_db
def test_customer_cannot_change_status_or_notes(customer, inquiry_a):
    with pytest.raises(AuthorizationError):
        services.update_status(customer, inquiry_a.id, "CLOSED")
    with pytest.raises(AuthorizationError):
        services.apply_staff_update(customer, inquiry_a.id, internal_notes="x")


@pytest.mark.django_db
def test_update_missing_inquiry_is_not_found(admin):
    with pytest.raises(NotFoundError):
        services.update_status(admin, 999, "CLOSED")


@pytest.mark.django_db
def test_notes_overwrite_verbatim(admin, inquiry_a):
    services.update_notes(admin, inquiry_a.id, "  要再確認\n")
    assert Inquiry.objects.get(pk=inquiry_a.pk).internal_notes == "  要再確認\n"
    services.update_notes(admin, inquiry_a.id, None)
    assert Inquiry.objects.get(pk=inquiry_a.pk).internal_notes == ""


@pytest.mark.django_db
def test_apply_staff_update_both_fields(member_a, inquiry_a):
    updated = services.apply_staff_update(member_a, inquiry_a.id, status="RESOLVED", internal_notes="電話済み")
    assert (updated.status, updated.internal_notes) == ("RESOLVED", "電話済み")


@pytest.mark.django_db
def test_status_summary(admin, member_a, inquiry_a, inquiry_b):
    _general()
    services.update_status(admin, inquiry_b.id, "CLOSED")

    summary = services.status_summary(admin)
    assert summary == {
        "total": 3, "new": 2, "in_progress": 0, "resolved": 0, "closed": 1, "this_month": 3,
    }
    assert services.status_summary(member_a)["total"] == 1
    assert services.status_summary(admin, kind=services.GENERAL)["total"] == 1


# ---- response thread ----

@pytest.mark.django_db
def test_thread_keeps_call_order(admin, customer, member_a, inquiry_a):
    a = services.append_response(member_a, inquiry_a.id, "ご連絡ありがとうございます")
    b = services.append_response(customer, inquiry_a.id, "よろしくお願いします")
    c = services.append_response(admin, inquiry_a.id, "運営から補足です")

    thread = list(InquiryResponse.objects.filter(inquiry=inquiry_a))
    assert thread == [a, b, c]
    assert [r.sender for r in thread] == [ResponseSender.MEMBER, ResponseSender.CUSTOMER, ResponseSender.ADMIN]
    assert [r.sender_name for r in thread] == ["田中", "佐藤 花子", "運営 鈴木"]
    stamps = [r.created_at for r in thread]
    assert stamps == sorted(stamps)


@pytest.mark.django_db
def test_created_at_never_goes_backwards(member_a, inquiry_a):
    future = timezone.now() + timedelta(minutes=5)
    InquiryResponse.objects.create(
        inquiry=inquiry_a, sender=ResponseSender.MEMBER, sender_name="田中", message="先行", created_at=future
    )
    later = services.append_response(member_a, inquiry_a.id, "続き")
    assert later.created_at >= future


@pytest.mark.django_db
def test_blank_reply_rejected(member_a, inquiry_a):
    with pytest.raises(ValidationError) as err:
        services.append_response(member_a, inquiry_a.id, "  \n ")
    assert err.value.field == "message"


@pytest.mark.django_db
def test_sender_must_match_role(customer, member_a, inquiry_a):
    with pytest.raises(AuthorizationError):
        services.append_response(customer, inquiry_a.id, "なりすまし", sender="ADMIN")
    with pytest.raises(ValidationError):
        services.append_response(member_a, inquiry_a.id, "x", sender="robot")
    ok = services.append_response(member_a, inquiry_a.id, "本人です", sender="member")
    assert ok.sender == ResponseSender.MEMBER


@pytest.mark.django_db
def test_customer_reply_only_on_own_inquiry(other_customer, inquiry_a):
    with pytest.raises(AuthorizationError):
        services.append_response(other_customer, inquiry_a.id, "横から失礼します")


@pytest.mark.django_db
def test_customer_reply_does_not_mark_responded(customer, inquiry_a):
    services.append_response(customer, inquiry_a.id, "追記です")
    inquiry_a.refresh_from_db()
    assert inquiry_a.responded_at is None
    assert inquiry_a.status == InquiryStatus.NEW


@pytest.mark.django_db
def test_responded_at_set_once_by_first_staff_reply(member_a, customer, admin, inquiry_a):
    first = services.append_response(member_a, inquiry_a.id, "確認します")
    inquiry_a.refresh_from_db()
    assert inquiry_a.responded_at == first.created_at
    assert inquiry_a.status == InquiryStatus.IN_PROGRESS

    services.append_response(customer, inquiry_a.id, "お願いします")
    services.append_response(admin, inquiry_a.id, "補足")
    services.update_status(member_a, inquiry_a.id, "NEW")
    inquiry_a.refresh_from_db()
    assert inquiry_a.responded_at == first.created_at


@pytest.mark.django_db
def test_auto_advance_can_be_disabled(settings, member_a, inquiry_a):
    settings.INQUIRY_AUTO_ADVANCE_ON_REPLY = False
    services.append_response(member_a, inquiry_a.id, "確認します")
    inquiry_a.refresh_from_db()
    assert inquiry_a.status == InquiryStatus.NEW
    assert inquiry_a.responded_at is not None


@pytest.mark.django_db
def test_staff_reply_does_not_reopen_closed(admin, inquiry_a):
    services.update_status(admin, inquiry_a.id, "CLOSED")
    services.append_response(admin, inquiry_a.id, "念のためご連絡します")
    inquiry_a.refresh_from_db()
    assert inquiry_a.status == InquiryStatus.CLOSED


@pytest.mark.django_db
def test_admin_status_then_reply_on_42(admin, customer, company_a):
    inquiry = Inquiry.objects.create(
        id=42,
        company=company_a,
        customer_id=customer.customer_id,
        inquirer_name="佐藤 花子",
        inquirer_email="sato@example.com",
        message="見積もりをお願いします",
    )

    services.update_status(admin, 42, "IN_PROGRESS")
    response = services.append_response(admin, 42, "ご連絡ありがとうございます")

    inquiry.refresh_from_db()
    assert inquiry.status == InquiryStatus.IN_PROGRESS
    assert inquiry.responded_at == response.created_at
    assert inquiry.responses.count() == 1
