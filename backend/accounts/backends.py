"""
Custom authentication backend for multi-field login.

Allows users to authenticate using their ``username``, their
``mobile_number`` or their ``email`` together with their ``password``
(the MPIN).

This backend is registered in ``settings.AUTHENTICATION_BACKENDS``
so that Django's ``authenticate()`` call dispatches to it.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.db.models import Q

User = get_user_model()


class MultiFieldAuthBackend(ModelBackend):
    """
    Authenticate against username, mobile_number, or email.

    When ``django.contrib.auth.authenticate(identifier=..., password=...)``
    is called, this backend resolves the user from the ``identifier``
    keyword argument.  Admin-site logins pass ``username=`` instead and
    are handled the same way.
    """

    def authenticate(self, request, identifier=None, password=None, **kwargs):
        """
        Resolve the user by *identifier* and verify *password*.

        Returns
        -------
        User | None
            The authenticated user, or ``None`` on failure.
        """
        identifier = identifier or kwargs.get(User.USERNAME_FIELD)
        if identifier is None or password is None:
            return None

        identifier = identifier.strip()
        try:
            user = User.objects.get(
                Q(username=identifier)
                | Q(mobile_number=identifier)
                | Q(email=identifier)
            )
        except User.DoesNotExist:
            # Run the default password hasher to mitigate timing attacks
            User().set_password(password)
            return None
        except User.MultipleObjectsReturned:
            # email is not unique; ambiguous identifiers never authenticate
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
