import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('stations', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Rental',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('active', 'Active'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='active', max_length=20)),
                ('payment_status', models.CharField(choices=[('unpaid', 'Unpaid'), ('pending', 'Pending'), ('completed', 'Completed')], default='unpaid', max_length=20)),
                ('rental_date', models.DateTimeField()),
                ('return_date', models.DateTimeField(blank=True, null=True)),
                ('hourly_rate', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('total_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('battery', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rentals', to='stations.battery')),
                ('pickup_station', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='pickups', to='stations.station')),
                ('return_station', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='returns', to='stations.station')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rentals', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'battery_rentals',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'status'], name='rentals_user_status_idx'),
                    models.Index(fields=['battery', 'status'], name='rentals_battery_status_idx'),
                    models.Index(fields=['status', 'created_at'], name='rentals_status_created_idx'),
                    models.Index(fields=['payment_status'], name='rentals_payment_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'active')), fields=('battery',), name='one_active_rental_per_battery'),
                    models.UniqueConstraint(condition=models.Q(('status', 'active')), fields=('user',), name='one_active_rental_per_user'),
                    models.CheckConstraint(condition=models.Q(('return_date__isnull', True), ('return_date__gte', models.F('rental_date')), _connector='OR'), name='return_not_before_rental'),
                    models.CheckConstraint(condition=models.Q(models.Q(('status', 'active'), _negated=True), ('total_cost__isnull', True), _connector='OR'), name='no_cost_while_active'),
                ],
            },
        ),
    ]
