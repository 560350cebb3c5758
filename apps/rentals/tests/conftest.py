import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.accounts.services import Caller
from apps.stations.models import Station, Battery, BatteryStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def renter(db):
    """Create and return a customer who rents batteries."""
    return User.objects.create_user(
        email='renter@example.com',
        password='TestPass123!',
        full_name='Battery Renter',
    )


@pytest.fixture
def other_renter(db):
    """Create and return a second customer."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        full_name='Other Renter',
    )


@pytest.fixture
def station_manager(db):
    """Create and return a station manager."""
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        full_name='Station Manager',
        role=UserRole.STATION_MANAGER,
    )


@pytest.fixture
def admin_user(db):
    """Create and return an admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        full_name='Admin User',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def renter_caller(renter):
    return Caller.from_user(renter)


@pytest.fixture
def other_caller(other_renter):
    return Caller.from_user(other_renter)


@pytest.fixture
def manager_caller(station_manager):
    return Caller.from_user(station_manager)


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def renter_client(renter):
    """Return API client authenticated as the renter."""
    return _client_for(renter)


@pytest.fixture
def other_client(other_renter):
    """Return API client authenticated as the other customer."""
    return _client_for(other_renter)


@pytest.fixture
def manager_client(station_manager):
    """Return API client authenticated as the station manager."""
    return _client_for(station_manager)


@pytest.fixture
def pickup_station(db):
    """Create and return the station batteries are picked up from."""
    return Station.objects.create(
        name='Westlands Hub',
        location='Westlands, Nairobi',
    )


@pytest.fixture
def return_station(db):
    """Create and return a second station for returns."""
    return Station.objects.create(
        name='Kilimani Point',
        location='Kilimani, Nairobi',
    )


@pytest.fixture
def closed_station(db):
    return Station.objects.create(
        name='Closed Depot',
        is_active=False,
    )


@pytest.fixture
def battery(pickup_station):
    """Create and return an available battery at the pickup station."""
    return Battery.objects.create(
        serial_number='ECO-0001',
        battery_type='lithium',
        capacity_kwh=Decimal('2.50'),
        current_station=pickup_station,
    )


@pytest.fixture
def second_battery(pickup_station):
    return Battery.objects.create(
        serial_number='ECO-0002',
        battery_type='lithium',
        current_station=pickup_station,
    )


@pytest.fixture
def charging_battery(pickup_station):
    return Battery.objects.create(
        serial_number='ECO-0003',
        status=BatteryStatus.CHARGING,
        current_station=pickup_station,
    )
