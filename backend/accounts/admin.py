from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Office, User


@admin.register(Office)
class OfficeAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "is_external")
    list_filter = ("category", "is_external")
    search_fields = ("name",)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "first_name", "last_name",
                    "kind", "role", "is_active")
    search_fields = ("username", "email", "telegram_username")
    list_filter = ("kind", "role", "is_active")
    filter_horizontal = ("groups", "user_permissions", "offices")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Participium", {"fields": ("kind", "role", "offices",
                                    "telegram_username", "receive_emails")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Participium", {"fields": ("email", "first_name", "last_name",
                                    "kind", "role")}),
    )
