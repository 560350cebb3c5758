from rest_framework import serializers
from .models import Payment, PaymentStatus, PaymentMethod
from apps.accounts.serializers import UserMinimalSerializer


# =============================================================================
# Input Serializers
# =============================================================================

class PaymentFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for payment listing.

    Query Parameters:
        status (str): Filter by payment status
        payment_method (str): Filter by method
        rental_id (UUID): Payments for one rental
        user_id (UUID): Filter by payer (managers and admins only)
        min_amount, max_amount (decimal): Amount range
    """

    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    rental_id = serializers.UUIDField(required=False)
    user_id = serializers.UUIDField(required=False)
    min_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    max_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)


class CreatePaymentSerializer(serializers.Serializer):
    """
    Input for recording a payment.

    ``user_id`` defaults to the authenticated user. Amount range is checked
    by the settlement service.
    """

    user_id = serializers.UUIDField(required=False)
    rental_id = serializers.UUIDField(required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    currency = serializers.CharField(max_length=3, required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    payment_reference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    mpesa_receipt_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    metadata = serializers.DictField(required=False)


class UpdatePaymentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PaymentStatus.choices)
    notes = serializers.CharField(required=False, allow_blank=True)


class RefundPaymentSerializer(serializers.Serializer):
    """
    Input for refunding a payment.

    Fields:
        refund_amount (decimal): Optional; defaults to the full amount
        reason (str): Required
        refund_method (str): Optional; 'original' or omitted keeps the
            original payment method
    """

    refund_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    reason = serializers.CharField()
    refund_method = serializers.ChoiceField(
        choices=[('original', 'Original')] + list(PaymentMethod.choices),
        required=False,
    )


class BulkUpdatePaymentsSerializer(serializers.Serializer):
    """
    Input for bulk status updates.

    Only ``status`` is accepted in ``update_data``; other keys are ignored.
    """

    payment_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    update_data = serializers.DictField()

    def validate_update_data(self, value):
        status = value.get('status')
        if status is None:
            raise serializers.ValidationError('No valid update fields provided.')
        if status not in PaymentStatus.values:
            raise serializers.ValidationError(f"'{status}' is not a valid status.")
        return {'status': status}


# =============================================================================
# Output Serializers
# =============================================================================

class PaymentSerializer(serializers.ModelSerializer):
    """Main serializer for payments."""

    user = UserMinimalSerializer(read_only=True)
    processed_by = UserMinimalSerializer(read_only=True)
    is_refund = serializers.BooleanField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id',
            'user',
            'rental',
            'amount',
            'currency',
            'payment_method',
            'status',
            'payment_reference',
            'mpesa_receipt_number',
            'description',
            'metadata',
            'is_refund',
            'processed_at',
            'processed_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class RefundResultSerializer(serializers.Serializer):
    refund_id = serializers.UUIDField()
    refund_amount = serializers.DecimalField(max_digits=10, decimal_places=2)


class BulkUpdateResultSerializer(serializers.Serializer):
    updated_count = serializers.IntegerField()
    skipped_ids = serializers.ListField(child=serializers.UUIDField())
