import pytest
from decimal import Decimal
from uuid import uuid4
from django.urls import reverse
from rest_framework import status
from apps.payments.models import Payment, PaymentStatus
from apps.rentals.models import RentalPaymentStatus


# =============================================================================
# List / Retrieve / Create
# =============================================================================

@pytest.mark.django_db
class TestPaymentList:
    """Tests for GET /api/payments/"""

    def test_customer_sees_own_payments(self, payer_client, other_client, pending_payment):
        url = reverse('payments:payment-list')

        own = payer_client.get(url)
        other = other_client.get(url)

        assert [p['id'] for p in own.data['results']] == [str(pending_payment.id)]
        assert other.data['results'] == []

    def test_filter_by_status(self, manager_client, pending_payment, completed_payment):
        url = reverse('payments:payment-list')
        response = manager_client.get(url, {'status': 'pending'})

        assert response.status_code == status.HTTP_200_OK
        assert [p['id'] for p in response.data['results']] == [str(pending_payment.id)]

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('payments:payment-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestPaymentRetrieve:
    """Tests for GET /api/payments/{id}/"""

    def test_owner_retrieves(self, payer_client, pending_payment):
        url = reverse('payments:payment-detail', args=[pending_payment.id])
        response = payer_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data['amount']) == Decimal('500.00')
        assert response.data['is_refund'] is False

    def test_other_customer_forbidden(self, other_client, pending_payment):
        url = reverse('payments:payment-detail', args=[pending_payment.id])
        response = other_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestPaymentCreate:
    """Tests for POST /api/payments/"""

    def test_record_payment_for_rental(self, payer_client, payer, completed_rental):
        url = reverse('payments:payment-list')
        response = payer_client.post(url, {
            'rental_id': str(completed_rental.id),
            'amount': '500.00',
            'payment_method': 'mpesa',
            'payment_reference': 'MPESA-XYZ',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == PaymentStatus.PENDING
        assert response.data['user']['id'] == str(payer.id)
        completed_rental.refresh_from_db()
        assert completed_rental.payment_status == RentalPaymentStatus.PENDING

    def test_negative_amount_rejected(self, payer_client):
        url = reverse('payments:payment-list')
        response = payer_client.post(url, {
            'amount': '-5.00',
            'payment_method': 'cash',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_amount'

    def test_invalid_method_rejected(self, payer_client):
        url = reverse('payments:payment-list')
        response = payer_client.post(url, {
            'amount': '5.00',
            'payment_method': 'cheque',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_refund_reference_reserved(self, payer_client):
        url = reverse('payments:payment-list')
        response = payer_client.post(url, {
            'amount': '1.00',
            'payment_method': 'mpesa',
            'payment_reference': 'REFUND-MP-COMPLETED',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_payment_reference'

    def test_unknown_rental(self, payer_client):
        url = reverse('payments:payment-list')
        response = payer_client.post(url, {
            'rental_id': str(uuid4()),
            'amount': '5.00',
            'payment_method': 'cash',
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'rental_not_found'

    def test_customer_cannot_pay_for_other_user(self, other_client, payer):
        url = reverse('payments:payment-list')
        response = other_client.post(url, {
            'user_id': str(payer.id),
            'amount': '5.00',
            'payment_method': 'cash',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_manager_records_for_customer(self, manager_client, payer, completed_rental):
        url = reverse('payments:payment-list')
        response = manager_client.post(url, {
            'user_id': str(payer.id),
            'rental_id': str(completed_rental.id),
            'amount': '500.00',
            'payment_method': 'cash',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED


# =============================================================================
# Status / Refund / Bulk
# =============================================================================

@pytest.mark.django_db
class TestPaymentStatusUpdate:
    """Tests for PATCH /api/payments/{id}/status/"""

    def test_manager_completes_payment(self, manager_client, pending_payment, completed_rental):
        url = reverse('payments:payment-status', args=[pending_payment.id])
        response = manager_client.patch(url, {'status': 'completed'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == PaymentStatus.COMPLETED
        assert response.data['processed_at'] is not None
        completed_rental.refresh_from_db()
        assert completed_rental.payment_status == RentalPaymentStatus.COMPLETED

    def test_customer_forbidden(self, payer_client, pending_payment):
        url = reverse('payments:payment-status', args=[pending_payment.id])
        response = payer_client.patch(url, {'status': 'completed'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        pending_payment.refresh_from_db()
        assert pending_payment.status == PaymentStatus.PENDING

    def test_invalid_transition_conflict(self, manager_client, completed_payment):
        url = reverse('payments:payment-status', args=[completed_payment.id])
        response = manager_client.patch(url, {'status': 'pending'}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'invalid_payment_transition'

    def test_unknown_status_value(self, manager_client, pending_payment):
        url = reverse('payments:payment-status', args=[pending_payment.id])
        response = manager_client.patch(url, {'status': 'lost'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestPaymentRefund:
    """Tests for POST /api/payments/{id}/refund/"""

    def test_partial_refund_then_second_refund_fails(self, manager_client, completed_payment):
        url = reverse('payments:payment-refund', args=[completed_payment.id])

        first = manager_client.post(url, {'refund_amount': '200.00', 'reason': 'Faulty'}, format='json')
        second = manager_client.post(url, {'refund_amount': '400.00', 'reason': 'Again'}, format='json')

        assert first.status_code == status.HTTP_200_OK
        assert Decimal(first.data['refund_amount']) == Decimal('200.00')
        refund = Payment.objects.get(id=first.data['refund_id'])
        assert refund.amount == Decimal('-200.00')
        assert refund.status == PaymentStatus.COMPLETED

        assert second.status_code == status.HTTP_409_CONFLICT
        assert second.data['code'] == 'payment_not_completed'

    def test_refund_more_than_paid(self, manager_client, completed_payment):
        url = reverse('payments:payment-refund', args=[completed_payment.id])
        response = manager_client.post(url, {'refund_amount': '900.00', 'reason': 'Oops'}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'refund_exceeds_original'

    def test_reason_required(self, manager_client, completed_payment):
        url = reverse('payments:payment-refund', args=[completed_payment.id])
        response = manager_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'reason' in response.data

    def test_original_refund_method_keeps_payment_method(self, manager_client, completed_payment):
        url = reverse('payments:payment-refund', args=[completed_payment.id])
        response = manager_client.post(
            url, {'reason': 'Full', 'refund_method': 'original'}, format='json'
        )

        refund = Payment.objects.get(id=response.data['refund_id'])
        assert refund.payment_method == completed_payment.payment_method

    def test_customer_forbidden(self, payer_client, completed_payment):
        url = reverse('payments:payment-refund', args=[completed_payment.id])
        response = payer_client.post(url, {'reason': 'Mine'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestPaymentBulkUpdate:
    """Tests for PATCH /api/payments/bulk/"""

    def test_admin_bulk_update_reports_partial_success(
        self, admin_client, pending_payment, completed_payment
    ):
        url = reverse('payments:payment-bulk')
        response = admin_client.patch(url, {
            'payment_ids': [str(pending_payment.id), str(completed_payment.id)],
            'update_data': {'status': 'completed', 'amount': '1.00'},
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['updated_count'] == 1
        assert response.data['skipped_ids'] == [str(completed_payment.id)]
        pending_payment.refresh_from_db()
        assert pending_payment.amount == Decimal('500.00')

    def test_manager_forbidden(self, manager_client, pending_payment):
        url = reverse('payments:payment-bulk')
        response = manager_client.patch(url, {
            'payment_ids': [str(pending_payment.id)],
            'update_data': {'status': 'completed'},
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_no_allowed_fields(self, admin_client, pending_payment):
        url = reverse('payments:payment-bulk')
        response = admin_client.patch(url, {
            'payment_ids': [str(pending_payment.id)],
            'update_data': {'amount': '1.00'},
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_empty_id_list(self, admin_client):
        url = reverse('payments:payment-bulk')
        response = admin_client.patch(url, {
            'payment_ids': [],
            'update_data': {'status': 'completed'},
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
