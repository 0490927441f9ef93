# apps/companies/admin.py
from django.contrib import admin

from .models import Company, ConstructionCase


class ConstructionCaseInline(admin.TabularInline):
    model = ConstructionCase
    extra = 0
    fields = ("title", "status", "published_at")


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "prefecture", "city", "email", "is_published", "inquiry_count", "created_at")
    list_filter = ("is_published", "prefecture")
    search_fields = ("name", "city", "email")
    inlines = [ConstructionCaseInline]

    def inquiry_count(self, obj: Company):
        # shown so staff see what a delete will take with it (inquiries cascade)
        return obj.inquiries.count()
    inquiry_count.short_description = "Inquiries"


@admin.register(ConstructionCase)
class ConstructionCaseAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "company", "status", "published_at")
    list_filter = ("status",)
    search_fields = ("title", "company__name")
