from django.contrib import admin

from .models import Message, Report


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    readonly_fields = ("sequence", "author", "author_kind", "author_username", "body", "is_private", "created_at")
    can_delete = False


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "status", "citizen",
                    "assigned_staff", "assigned_external_maintainer", "created_at")
    list_filter = ("status", "category", "anonymous")
    search_fields = ("title", "description", "citizen__username")
    readonly_fields = ("version",)
    inlines = [MessageInline]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("report", "sequence", "author_kind", "author_username", "is_private", "created_at")
    list_filter = ("is_private", "author_kind")
