import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.accounts.services import Caller
from apps.payments.models import Payment, PaymentMethod, PaymentStatus
from apps.rentals.models import Rental, RentalStatus
from apps.stations.models import Station, Battery


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def payer(db):
    """Create and return a customer who pays for rentals."""
    return User.objects.create_user(
        email='payer@example.com',
        password='TestPass123!',
        full_name='Paying Customer',
    )


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(
        email='someone@example.com',
        password='TestPass123!',
        full_name='Someone Else',
    )


@pytest.fixture
def station_manager(db):
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        role=UserRole.STATION_MANAGER,
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def payer_caller(payer):
    return Caller.from_user(payer)


@pytest.fixture
def manager_caller(station_manager):
    return Caller.from_user(station_manager)


@pytest.fixture
def admin_caller(admin_user):
    return Caller.from_user(admin_user)


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def payer_client(payer):
    """Return API client authenticated as the payer."""
    return _client_for(payer)


@pytest.fixture
def other_client(other_customer):
    return _client_for(other_customer)


@pytest.fixture
def manager_client(station_manager):
    return _client_for(station_manager)


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def station(db):
    return Station.objects.create(name='CBD Station', location='Moi Avenue')


@pytest.fixture
def completed_rental(payer, station):
    """A returned rental awaiting payment, billed 500."""
    battery = Battery.objects.create(serial_number='PAY-0001', current_station=station)
    now = timezone.now()
    return Rental.objects.create(
        user=payer,
        battery=battery,
        pickup_station=station,
        return_station=station,
        status=RentalStatus.COMPLETED,
        rental_date=now - timedelta(hours=10),
        return_date=now,
        hourly_rate=Decimal('50.00'),
        total_cost=Decimal('500.00'),
    )


@pytest.fixture
def pending_payment(payer, completed_rental):
    return Payment.objects.create(
        user=payer,
        rental=completed_rental,
        amount=Decimal('500.00'),
        payment_method=PaymentMethod.MPESA,
        payment_reference='MP-500',
    )


@pytest.fixture
def completed_payment(payer, completed_rental):
    """A settled payment of 500 for the completed rental."""
    return Payment.objects.create(
        user=payer,
        rental=completed_rental,
        amount=Decimal('500.00'),
        payment_method=PaymentMethod.MPESA,
        payment_reference='MP-COMPLETED',
        description='Rental payment',
        status=PaymentStatus.COMPLETED,
        processed_at=timezone.now(),
    )
