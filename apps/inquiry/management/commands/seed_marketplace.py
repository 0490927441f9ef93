# apps/inquiry/management/commands/seed_marketplace.py
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from apps.accounts.models import Admin, Customer, Member
from apps.companies.models import Company
from apps.inquiry import services
from apps.rbac.actors import actor_for_user

COMPANIES = [
    {
        "name": "株式会社ナゴヤホーム",
        "prefecture": "愛知県",
        "city": "名古屋市中区",
        "address": "愛知県名古屋市中区栄1-1-1",
        "phone_number": "052-123-4567",
        "email": "info@nagoya-home.co.jp",
        "website_url": "https://nagoya-home.co.jp",
        "is_published": True,
    },
    {
        "name": "株式会社豊田ハウジング",
        "prefecture": "愛知県",
        "city": "豊田市",
        "address": "愛知県豊田市若宮町1-1",
        "phone_number": "0565-987-6543",
        "email": "contact@toyota-housing.co.jp",
        "website_url": "https://toyota-housing.co.jp",
        "is_published": True,
    },
    {
        "name": "株式会社岡崎工務店",
        "prefecture": "愛知県",
        "city": "岡崎市",
        "address": "愛知県岡崎市康生町1-1",
        "phone_number": "0564-777-8888",
        "email": "support@okazaki-komuten.jp",
        "is_published": False,
    },
]


class Command(BaseCommand):
    help = "Seed demo companies, one user per role and two inquiries. Safe to re-run."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="demo-pass-1234", help="Password for every demo user")

    def _user(self, email, password, **extra):
        U = get_user_model()
        user, created = U.objects.get_or_create(username=email, defaults={"email": email, **extra})
        if created:
            user.set_password(password)
            user.save(update_fields=["password"])
        self.stdout.write(f"{'Created' if created else 'Exists'}: {email}")
        return user

    def handle(self, *args, **opts):
        password = opts["password"]

        companies = []
        for data in COMPANIES:
            company, _ = Company.objects.get_or_create(name=data["name"], defaults=data)
            companies.append(company)
        self.stdout.write(self.style.SUCCESS(f"companies: {len(companies)}"))

        admin_user = self._user("admin@matching-site.jp", password, is_staff=True)
        Admin.objects.get_or_create(user=admin_user, defaults={"name": "管理者 太郎"})

        tanaka = self._user("tanaka@nagoya-home.co.jp", password)
        Member.objects.get_or_create(user=tanaka, defaults={"company": companies[0], "name": "田中一郎"})
        yamada = self._user("yamada@toyota-housing.co.jp", password)
        Member.objects.get_or_create(user=yamada, defaults={"company": companies[1], "name": "山田太郎"})

        sato = self._user("customer1@example.com", password)
        Customer.objects.get_or_create(
            user=sato, defaults={"last_name": "佐藤", "first_name": "花子", "phone_number": "090-1234-5678"}
        )

        if sato.customer_profile.inquiries.exists():
            self.stdout.write("inquiries already seeded")
            return

        # demo data should not email real-looking company addresses
        notify = settings.NOTIFY_INQUIRIES
        settings.NOTIFY_INQUIRIES = False
        try:
            customer = actor_for_user(sato)
            first = services.submit_inquiry(
                actor=customer,
                company_id=companies[0].id,
                message="平屋の住宅を検討しています。見学会の予定はありますでしょうか？",
            )
            services.append_response(
                actor_for_user(tanaka),
                first.id,
                "お問い合わせありがとうございます。来月の第2土曜日に見学会を予定しております。",
            )
            services.submit_inquiry(
                actor=customer,
                company_id=companies[1].id,
                message="高断熱住宅について詳しく知りたいです。",
            )
        finally:
            settings.NOTIFY_INQUIRIES = notify

        self.stdout.write(self.style.SUCCESS("Done. 2 inquiries, 1 reply"))
