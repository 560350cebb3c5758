import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a customer."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        full_name='Test User',
        phone='+254700000001',
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        is_active=False,
    )


@pytest.fixture
def manager(db):
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        role=UserRole.STATION_MANAGER,
    )


@pytest.fixture
def admin(db):
    return User.objects.create_superuser(
        email='admin@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def access_token(user):
    return str(RefreshToken.for_user(user).access_token)


@pytest.fixture
def authenticated_client(api_client, access_token):
    """Return API client authenticated as the customer."""
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {access_token}')
    return api_client
