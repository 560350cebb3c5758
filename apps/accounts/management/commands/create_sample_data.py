"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data [--clear]

This creates:
- 4 users (admin, station manager, two customers)
- 3 stations (one closed for maintenance)
- 6 batteries
- A completed, paid rental and an active rental, created through the
  rental and settlement services so battery and payment state line up
"""

from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.accounts.models import User, UserRole
from apps.accounts.services import Caller
from apps.payments.models import Payment, PaymentMethod, PaymentStatus
from apps.payments.services import record_payment, update_payment_status
from apps.rentals.models import Rental
from apps.rentals.services import create_rental, return_rental
from apps.stations.models import Station, Battery, BatteryStatus


class Command(BaseCommand):
    help = 'Create sample stations, batteries, users and rentals'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        stations = self.create_stations(users['manager'])
        batteries = self.create_batteries(stations)
        self.create_rentals(users, stations, batteries)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@example.com / admin123 (admin)')
        self.stdout.write('  manager@example.com / password123 (station manager)')
        self.stdout.write('  wanjiru@example.com / password123')
        self.stdout.write('  otieno@example.com / password123')

    def clear_data(self):
        """Clear engine data; rentals and payments first because of PROTECT."""
        Payment.objects.all().delete()
        Rental.objects.all().delete()
        Battery.objects.all().delete()
        Station.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()
        User.objects.filter(email='admin@example.com').delete()

    def create_users(self):
        self.stdout.write('  Creating users...')

        specs = [
            ('admin', 'admin@example.com', 'Admin User', UserRole.ADMIN, 'admin123'),
            ('manager', 'manager@example.com', 'Grace Manager', UserRole.STATION_MANAGER, 'password123'),
            ('wanjiru', 'wanjiru@example.com', 'Wanjiru Kamau', UserRole.CUSTOMER, 'password123'),
            ('otieno', 'otieno@example.com', 'Otieno Odhiambo', UserRole.CUSTOMER, 'password123'),
        ]

        users = {}
        for key, email, full_name, role, password in specs:
            user, _ = User.objects.get_or_create(
                email=email,
                defaults={
                    'full_name': full_name,
                    'role': role,
                    'is_staff': role == UserRole.ADMIN,
                    'is_superuser': role == UserRole.ADMIN,
                }
            )
            user.set_password(password)
            user.save()
            users[key] = user

        return users

    def create_stations(self, manager):
        self.stdout.write('  Creating stations...')

        station_data = [
            ('Central Station', '123 Main St, Nairobi', Decimal('-1.286389'), Decimal('36.817223'), 20, True, True),
            ('Westlands Station', '456 Waiyaki Way, Nairobi', Decimal('-1.266000'), Decimal('36.802100'), 10, False, True),
            ('Mombasa Road Station', '789 Mombasa Road, Nairobi', Decimal('-1.332600'), Decimal('36.888200'), 5, True, False),
        ]

        stations = []
        for name, location, lat, lng, capacity, accepts_plastic, is_active in station_data:
            station, _ = Station.objects.get_or_create(
                name=name,
                defaults={
                    'location': location,
                    'latitude': lat,
                    'longitude': lng,
                    'capacity': capacity,
                    'accepts_plastic': accepts_plastic,
                    'is_active': is_active,
                    'manager': manager,
                }
            )
            stations.append(station)

        return stations

    def create_batteries(self, stations):
        self.stdout.write('  Creating batteries...')

        central, westlands, _ = stations
        battery_data = [
            ('SN001', 'Model X', Decimal('2.00'), Decimal('80'), BatteryStatus.AVAILABLE, central),
            ('SN002', 'Model Y', Decimal('2.50'), Decimal('90'), BatteryStatus.AVAILABLE, central),
            ('SN003', 'Model S', Decimal('2.50'), Decimal('100'), BatteryStatus.AVAILABLE, westlands),
            ('SN004', 'Model S', Decimal('2.50'), Decimal('35'), BatteryStatus.CHARGING, westlands),
            ('SN005', 'Model X', Decimal('2.00'), Decimal('0'), BatteryStatus.MAINTENANCE, central),
            ('SN006', 'Model Y', Decimal('2.50'), Decimal('100'), BatteryStatus.AVAILABLE, westlands),
        ]

        batteries = []
        for serial, model, capacity, charge, status, station in battery_data:
            battery, _ = Battery.objects.get_or_create(
                serial_number=serial,
                defaults={
                    'model': model,
                    'battery_type': 'lithium-ion',
                    'capacity_kwh': capacity,
                    'current_charge_percentage': charge,
                    'status': status,
                    'current_station': station,
                }
            )
            batteries.append(battery)

        return batteries

    def create_rentals(self, users, stations, batteries):
        """One finished and paid rental, one still out."""
        self.stdout.write('  Creating rentals...')

        if Rental.objects.exists():
            self.stdout.write('    Rentals already present, skipping')
            return

        central, westlands, _ = stations
        manager = Caller.from_user(users['manager'])

        finished = create_rental(
            user_id=users['wanjiru'].id,
            battery_id=batteries[0].id,
            pickup_station_id=central.id,
        )
        # Pretend the battery was out for a few hours
        Rental.objects.filter(id=finished.id).update(
            rental_date=finished.rental_date - timedelta(hours=3, minutes=20)
        )
        result = return_rental(
            rental_id=finished.id,
            return_station_id=westlands.id,
            caller=manager,
        )
        payment = record_payment(
            caller=manager,
            user_id=users['wanjiru'].id,
            rental_id=finished.id,
            amount=result['total_cost'],
            payment_method=PaymentMethod.MPESA,
            payment_reference='SAMPLE-MPESA-0001',
            mpesa_receipt_number='QWE123RTY',
        )
        update_payment_status(
            payment_id=payment.id,
            status=PaymentStatus.COMPLETED,
            caller=manager,
        )

        create_rental(
            user_id=users['otieno'].id,
            battery_id=batteries[2].id,
            pickup_station_id=westlands.id,
        )
