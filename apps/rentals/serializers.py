from rest_framework import serializers
from .models import Rental, RentalStatus
from apps.accounts.serializers import UserMinimalSerializer
from apps.payments.models import PaymentMethod


# =============================================================================
# Input Serializers
# =============================================================================

class RentalFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for rental listing.

    Query Parameters:
        status (str): Filter by rental status
        user_id (UUID): Filter by renter (managers and admins only)
    """

    status = serializers.ChoiceField(choices=RentalStatus.choices, required=False)
    user_id = serializers.UUIDField(required=False)


class CreateRentalSerializer(serializers.Serializer):
    """Input for renting (swapping) a battery."""

    battery_id = serializers.UUIDField()
    pickup_station_id = serializers.UUIDField()


class ReturnRentalSerializer(serializers.Serializer):
    """
    Input for returning a battery.

    Fields:
        return_station_id (UUID): Where the battery is dropped off
        payment_method (str): Optional; when given, a pending payment for the
            final cost is recorded right after the return
    """

    return_station_id = serializers.UUIDField()
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class RentalSerializer(serializers.ModelSerializer):
    """Main serializer for rentals."""

    user = UserMinimalSerializer(read_only=True)
    battery_serial = serializers.CharField(source='battery.serial_number', read_only=True)
    pickup_station_name = serializers.CharField(source='pickup_station.name', read_only=True)
    return_station_name = serializers.CharField(
        source='return_station.name', read_only=True, default=None
    )

    class Meta:
        model = Rental
        fields = [
            'id',
            'user',
            'battery',
            'battery_serial',
            'pickup_station',
            'pickup_station_name',
            'return_station',
            'return_station_name',
            'status',
            'payment_status',
            'rental_date',
            'return_date',
            'hourly_rate',
            'total_cost',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ReturnResultSerializer(serializers.Serializer):
    rental_hours = serializers.IntegerField()
    total_cost = serializers.DecimalField(max_digits=10, decimal_places=2)
    payment_id = serializers.UUIDField(required=False)


class CostEstimateSerializer(serializers.Serializer):
    rental_id = serializers.UUIDField()
    status = serializers.CharField()
    hours = serializers.IntegerField()
    hourly_rate = serializers.DecimalField(max_digits=10, decimal_places=2)
    estimated_cost = serializers.DecimalField(max_digits=10, decimal_places=2)
