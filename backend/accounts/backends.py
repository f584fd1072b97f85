"""
Authentication backend for username-or-email login.

Citizens usually sign in with their e-mail address while staff accounts
are provisioned with a username; this backend accepts either one as the
``identifier`` together with the password.

Registered in ``settings.AUTHENTICATION_BACKENDS`` so that Django's
``authenticate()`` call dispatches to it.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.db.models import Q

User = get_user_model()


class IdentifierAuthBackend(ModelBackend):
    """
    Authenticate against ``username`` or ``email``.

    ``authenticate(identifier=..., password=...)`` resolves the user from
    the ``identifier`` keyword argument.  Plain ``username=`` calls (the
    admin login form) go through the same lookup.
    """

    def authenticate(self, request, identifier=None, password=None, **kwargs):
        if identifier is None:
            identifier = kwargs.get(User.USERNAME_FIELD)
        if identifier is None or password is None:
            return None

        try:
            user = User.objects.get(Q(username=identifier) | Q(email__iexact=identifier))
        except User.DoesNotExist:
            # Run the default password hasher to mitigate timing attacks
            User().set_password(password)
            return None
        except User.MultipleObjectsReturned:
            # One account's username equals another's e-mail
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
