from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed


class APIKeyAuthentication(BaseAuthentication):
    """
    API key authentication using the X-API-Key header.

    The acting staff member, when the client knows it, is passed in the
    X-Staff-Id header and becomes request.user.
    """

    def authenticate(self, request):
        api_key = request.META.get('HTTP_X_API_KEY')

        if not api_key:
            return None

        expected_api_key = getattr(settings, 'API_KEY', 'demo')

        if api_key != expected_api_key:
            raise AuthenticationFailed('Invalid API key')

        staff_id = request.META.get('HTTP_X_STAFF_ID')
        if not staff_id:
            return (None, api_key)

        User = get_user_model()
        try:
            user = User.objects.get(pk=int(staff_id), is_active=True)
        except (ValueError, User.DoesNotExist):
            raise AuthenticationFailed('Unknown staff member')

        return (user, api_key)

    def authenticate_header(self, request):
        return 'X-API-Key'
