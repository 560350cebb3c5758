import pytest
from decimal import Decimal
from unittest.mock import patch
from django.db import transaction

from apps.accounts.models import User
from apps.notifications import events
from apps.notifications.events import swap_event
from apps.rentals.services import create_rental
from apps.stations.models import Station, Battery


@pytest.fixture
def received():
    """Collect everything dispatched on swap_event during a test."""
    calls = []

    def listener(sender, event, payload, rooms, **kwargs):
        calls.append((event, payload, rooms))

    swap_event.connect(listener, weak=False)
    yield calls
    swap_event.disconnect(listener)


@pytest.mark.django_db
class TestEmit:

    def test_dispatched_only_after_commit(self, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            events.emit(events.RENTAL_CREATED, {'id': 'r1'})
            assert received == []

        assert len(callbacks) == 1
        assert received == [(events.RENTAL_CREATED, {'id': 'r1'}, (events.ADMIN_ROOM,))]

    def test_dropped_on_rollback(self, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(RuntimeError):
                with transaction.atomic():
                    events.emit(events.RENTAL_CANCELLED, {'id': 'r1'})
                    raise RuntimeError('abort')

        assert callbacks == []
        assert received == []

    def test_station_room(self, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            events.emit(
                events.BATTERY_RETURNED,
                {'battery_id': 'b1'},
                rooms=[events.station_room('s9')],
            )

        assert received == [(events.BATTERY_RETURNED, {'battery_id': 'b1'}, ('station-s9',))]

    def test_failing_subscriber_is_logged_not_raised(self, received, django_capture_on_commit_callbacks):
        def broken(sender, **kwargs):
            raise ConnectionError('display offline')

        swap_event.connect(broken, weak=False)
        try:
            with patch('apps.notifications.events.logger') as logger:
                with django_capture_on_commit_callbacks(execute=True):
                    events.emit(events.PAYMENT_CREATED, {'id': 'p1'})
        finally:
            swap_event.disconnect(broken)

        # other subscribers still get the event
        assert received == [(events.PAYMENT_CREATED, {'id': 'p1'}, (events.ADMIN_ROOM,))]
        logger.error.assert_called_once()

    def test_default_receiver_logs_every_event(self, django_capture_on_commit_callbacks):
        with patch('apps.notifications.receivers.logger') as logger:
            with django_capture_on_commit_callbacks(execute=True):
                events.emit(events.PAYMENT_REFUNDED, {'id': 'p1'})

        logger.info.assert_called_once()


@pytest.mark.django_db
class TestEngineEvents:
    """The rental and settlement services announce their changes."""

    def test_swap_announces_rental_and_station(self, received, django_capture_on_commit_callbacks):
        user = User.objects.create_user(email='events@example.com', password='TestPass123!')
        station = Station.objects.create(name='Events Station')
        battery = Battery.objects.create(serial_number='EVT-1', current_station=station)

        with django_capture_on_commit_callbacks(execute=True):
            rental = create_rental(
                user_id=user.id,
                battery_id=battery.id,
                pickup_station_id=station.id,
                hourly_rate=Decimal('50'),
            )

        names = [event for event, _, _ in received]
        assert names == [events.RENTAL_CREATED, events.BATTERY_RENTED]
        assert received[0][1]['id'] == str(rental.id)
        assert received[1][2] == (events.station_room(station.id),)
