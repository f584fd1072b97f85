"""
Reports app URL configuration.

All routes are registered under the ``/api/`` prefix
(included from ``participium.urls``).

Route Hierarchy
---------------
  ── Reports ─────────────────────────────────────────────────────
  GET    /api/reports/                              → staff listing (filters)
  POST   /api/reports/                              → citizen submits a report
  GET    /api/reports/map/                          → public map (no auth)
  GET    /api/reports/{id}/                         → report detail (staff)

  ── Workflow @actions ───────────────────────────────────────────
  PATCH  /api/reports/{id}/review/                  → MPRO accept / reject
  PATCH  /api/reports/{id}/status/                  → TOSM / EM progress update
  POST   /api/reports/{id}/assign-self/             → TOSM self-assignment
  POST   /api/reports/{id}/assign-external/         → TOSM engages an EM

  ── Nested: Messages ────────────────────────────────────────────
  GET    /api/reports/{report_pk}/messages/         → thread visible to caller
  POST   /api/reports/{report_pk}/messages/         → append a message
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_nested.routers import NestedDefaultRouter

from .views import MessageViewSet, ReportViewSet

router = DefaultRouter()
router.register(
    prefix=r"reports",
    viewset=ReportViewSet,
    basename="report",
)

reports_router = NestedDefaultRouter(
    parent_router=router,
    parent_prefix=r"reports",
    lookup="report",
)
reports_router.register(
    prefix=r"messages",
    viewset=MessageViewSet,
    basename="report-message",
)

urlpatterns = [
    path("", include(router.urls)),
    path("", include(reports_router.urls)),
]
