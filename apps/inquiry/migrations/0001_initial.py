from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("companies", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Inquiry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("inquirer_name", models.CharField(max_length=120)),
                ("inquirer_email", models.EmailField(max_length=254)),
                ("inquirer_phone", models.CharField(blank=True, default="", max_length=50)),
                ("message", models.TextField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("NEW", "新規"),
                            ("IN_PROGRESS", "対応中"),
                            ("RESOLVED", "解決済み"),
                            ("CLOSED", "クローズ"),
                        ],
                        db_index=True,
                        default="NEW",
                        max_length=20,
                    ),
                ),
                ("internal_notes", models.TextField(blank=True, default="")),
                ("responded_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "case",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="inquiries",
                        to="companies.constructioncase",
                    ),
                ),
                (
                    "company",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="inquiries",
                        to="companies.company",
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="inquiries",
                        to="accounts.customer",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "inquiries",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["company", "status", "-created_at"], name="inquiry_company_status_idx"),
                    models.Index(fields=["customer", "-created_at"], name="inquiry_customer_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("case__isnull", True), ("company__isnull", False), _connector="OR"),
                        name="inquiry_case_requires_company",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InquiryResponse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "sender",
                    models.CharField(
                        choices=[("ADMIN", "運営"), ("MEMBER", "工務店"), ("CUSTOMER", "お客様")],
                        max_length=10,
                    ),
                ),
                ("sender_name", models.CharField(max_length=150)),
                ("message", models.TextField()),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "inquiry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="responses",
                        to="inquiry.inquiry",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["inquiry", "created_at"], name="inquiry_resp_thread_idx"),
                ],
            },
        ),
    ]
