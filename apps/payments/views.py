from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .serializers import (
    PaymentSerializer,
    PaymentFilterSerializer,
    CreatePaymentSerializer,
    UpdatePaymentStatusSerializer,
    RefundPaymentSerializer,
    RefundResultSerializer,
    BulkUpdatePaymentsSerializer,
    BulkUpdateResultSerializer,
)

from apps.accounts.permissions import IsAdminOrManager, IsAdminRole
from apps.accounts.services import Caller
from apps.core.exceptions import SwapServiceError
from apps.core.responses import error_response
from apps.payments.services import (
    record_payment,
    update_payment_status,
    refund_payment,
    bulk_update_status,
    get_payment,
    list_payments,
)


class PaymentPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class PaymentViewSet(viewsets.GenericViewSet):
    """
    Payments and refunds.

    list: Payments visible to the caller (own payments for customers)
    retrieve: A single payment
    create: Record a pending payment
    status: Update a payment's status (admin/manager)
    refund: Refund a completed payment (admin/manager)
    bulk: Update the status of many payments (admin)
    """

    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = PaymentPagination

    def get_permissions(self):
        if self.action in ['update_status', 'refund']:
            return [IsAuthenticated(), IsAdminOrManager()]
        elif self.action == 'bulk_update':
            return [IsAuthenticated(), IsAdminRole()]
        return super().get_permissions()

    def get_caller(self):
        return Caller.from_user(self.request.user)

    @extend_schema(
        parameters=[PaymentFilterSerializer],
        responses={200: PaymentSerializer(many=True)},
    )
    def list(self, request):
        filter_serializer = PaymentFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        queryset = list_payments(caller=self.get_caller(), **filter_serializer.validated_data)

        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = PaymentSerializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = PaymentSerializer(queryset, many=True)
        return Response(serializer.data)

    @extend_schema(responses={200: PaymentSerializer})
    def retrieve(self, request, pk=None):
        try:
            payment = get_payment(payment_id=pk, caller=self.get_caller())
        except SwapServiceError as e:
            return error_response(e)

        return Response(PaymentSerializer(payment).data)

    @extend_schema(
        request=CreatePaymentSerializer,
        responses={201: PaymentSerializer},
    )
    def create(self, request):
        """
        Record a pending payment.

        POST /api/payments/
        Body: {"rental_id": "...", "amount": "100.00", "payment_method": "mpesa"}
        """
        serializer = CreatePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            payment = record_payment(
                caller=self.get_caller(),
                user_id=data.get('user_id', request.user.id),
                rental_id=data.get('rental_id'),
                amount=data['amount'],
                payment_method=data['payment_method'],
                currency=data.get('currency'),
                payment_reference=data.get('payment_reference'),
                mpesa_receipt_number=data.get('mpesa_receipt_number', ''),
                description=data.get('description', ''),
                metadata=data.get('metadata'),
            )
        except SwapServiceError as e:
            return error_response(e)

        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=UpdatePaymentStatusSerializer,
        responses={200: PaymentSerializer},
    )
    @action(detail=True, methods=['patch'], url_path='status', url_name='status')
    def update_status(self, request, pk=None):
        """
        PATCH /api/payments/{id}/status/
        Body: {"status": "completed", "notes": "optional"}
        """
        serializer = UpdatePaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = update_payment_status(
                payment_id=pk,
                status=serializer.validated_data['status'],
                notes=serializer.validated_data.get('notes'),
                caller=self.get_caller(),
            )
        except SwapServiceError as e:
            return error_response(e)

        return Response(PaymentSerializer(payment).data)

    @extend_schema(
        request=RefundPaymentSerializer,
        responses={200: RefundResultSerializer},
    )
    @action(detail=True, methods=['post'])
    def refund(self, request, pk=None):
        """
        Refund a completed payment.

        POST /api/payments/{id}/refund/
        Body: {"refund_amount": "200.00", "reason": "Faulty battery"}
        """
        serializer = RefundPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        refund_method = data.get('refund_method')
        if refund_method == 'original':
            refund_method = None

        try:
            result = refund_payment(
                payment_id=pk,
                refund_amount=data.get('refund_amount'),
                reason=data['reason'],
                refund_method=refund_method,
                caller=self.get_caller(),
            )
        except SwapServiceError as e:
            return error_response(e)

        return Response(RefundResultSerializer(result).data)

    @extend_schema(
        request=BulkUpdatePaymentsSerializer,
        responses={200: BulkUpdateResultSerializer},
    )
    @action(detail=False, methods=['patch'], url_path='bulk', url_name='bulk')
    def bulk_update(self, request):
        """
        PATCH /api/payments/bulk/
        Body: {"payment_ids": ["...", "..."], "update_data": {"status": "completed"}}
        """
        serializer = BulkUpdatePaymentsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = bulk_update_status(
                payment_ids=serializer.validated_data['payment_ids'],
                status=serializer.validated_data['update_data']['status'],
                caller=self.get_caller(),
            )
        except SwapServiceError as e:
            return error_response(e)

        return Response(BulkUpdateResultSerializer(result).data)
