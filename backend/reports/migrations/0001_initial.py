import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import accounts.models
import reports.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Report",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("description", models.TextField(verbose_name="Description")),
                ("category", models.CharField(choices=accounts.models.OfficeCategory.choices, db_index=True, max_length=50, verbose_name="Category")),
                ("status", models.CharField(choices=reports.models.ReportStatus.choices, db_index=True, default="Pending", max_length=20, verbose_name="Status")),
                ("latitude", models.FloatField(verbose_name="Latitude")),
                ("longitude", models.FloatField(verbose_name="Longitude")),
                ("anonymous", models.BooleanField(default=False, help_text="Hide the citizen's username from public representations.", verbose_name="Anonymous")),
                ("photo1", models.CharField(max_length=500, verbose_name="Photo 1")),
                ("photo2", models.CharField(blank=True, default="", max_length=500, verbose_name="Photo 2")),
                ("photo3", models.CharField(blank=True, default="", max_length=500, verbose_name="Photo 3")),
                ("comment", models.TextField(blank=True, help_text="Mandatory on rejection, optional on resolution.", null=True, verbose_name="Comment")),
                ("version", models.PositiveIntegerField(default=1, verbose_name="Version")),
                ("citizen", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="reports", to=settings.AUTH_USER_MODEL, verbose_name="Citizen")),
                ("assigned_staff", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_reports", to=settings.AUTH_USER_MODEL, verbose_name="Assigned Staff (TOSM)")),
                ("assigned_external_maintainer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="external_reports", to=settings.AUTH_USER_MODEL, verbose_name="Assigned External Maintainer")),
            ],
            options={
                "verbose_name": "Report",
                "verbose_name_plural": "Reports",
                "ordering": ["created_at", "id"],
                "indexes": [models.Index(fields=["status", "category"], name="report_status_category_idx")],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("body", models.TextField(verbose_name="Body")),
                ("is_private", models.BooleanField(default=False, help_text="Private messages are only visible to staff.", verbose_name="Private")),
                ("sequence", models.PositiveIntegerField(help_text="Position in the report thread, assigned at append time.", verbose_name="Sequence")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("report", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="messages", to="reports.report", verbose_name="Report")),
                ("author", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="report_messages", to=settings.AUTH_USER_MODEL, verbose_name="Staff Author")),
                ("author_kind", models.CharField(choices=[("citizen", "Citizen"), ("staff", "Staff")], max_length=10, verbose_name="Author Kind")),
                ("author_username", models.CharField(blank=True, default="", help_text="Staff username at posting time; blank for citizen messages.", max_length=150, verbose_name="Author Username")),
            ],
            options={
                "verbose_name": "Message",
                "verbose_name_plural": "Messages",
                "ordering": ["created_at", "sequence"],
                "constraints": [models.UniqueConstraint(fields=("report", "sequence"), name="unique_message_sequence_per_report")],
            },
        ),
    ]
