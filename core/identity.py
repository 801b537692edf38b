"""Current-user identity and sign-out, passed explicitly to the views' helpers."""
import logging

from django.contrib.auth import logout

logger = logging.getLogger(__name__)


class NotAuthenticated(Exception):
    """No signed-in user is available for an operation that needs one."""


class RequestIdentity:
    """Identity of the user attached to a request."""

    def __init__(self, request):
        self.request = request

    def current_user(self):
        user = getattr(self.request, 'user', None)
        if user is None or not user.is_authenticated:
            return None
        return user

    def sign_out(self):
        user = self.current_user()
        logout(self.request)
        if user is not None:
            logger.info('User %s signed out', user.get_username())
