# apps/companies/models.py
"""
Company directory and portfolio cases.

Only the fields the inquiry workflow and the consoles read are kept here;
directory/case editing screens live elsewhere.
"""
from __future__ import annotations

from django.db import models


class Company(models.Model):
    name = models.CharField(max_length=200)
    prefecture = models.CharField(max_length=20, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    phone_number = models.CharField(max_length=50, blank=True, default="")
    # inquiry notifications go here (plus active members)
    email = models.EmailField(blank=True, default="")
    website_url = models.URLField(blank=True, default="")
    logo_url = models.URLField(blank=True, default="")
    is_published = models.BooleanField(default=False, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name", "id"]
        verbose_name_plural = "companies"

    def __str__(self) -> str:
        return self.name


class ConstructionCase(models.Model):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "下書き"
        PUBLISHED = "PUBLISHED", "公開"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="cases")
    title = models.CharField(max_length=200)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT, db_index=True)
    published_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "id"]

    def __str__(self) -> str:
        return f"{self.title} ({self.company})"
