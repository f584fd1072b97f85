"""
Accounts app URL configuration.

Included in the project-level ``urls.py`` as::

    path('api/accounts/', include('accounts.urls')),

Endpoint Map
------------
    POST   /auth/login/                 → LoginView
    POST   /auth/token/refresh/         → TokenRefreshView (SimpleJWT)
    GET    /me/                         → MeView
    GET    /staff/external/             → ExternalMaintainerListView
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import ExternalMaintainerListView, LoginView, MeView

app_name = "accounts"

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="login"),
    path(
        "auth/token/refresh/",
        TokenRefreshView.as_view(),
        name="token-refresh",
    ),
    path("me/", MeView.as_view(), name="me"),
    path("staff/external/", ExternalMaintainerListView.as_view(), name="staff-external"),
]
