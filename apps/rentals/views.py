from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from django.db import transaction
from drf_spectacular.utils import extend_schema

from .serializers import (
    RentalSerializer,
    RentalFilterSerializer,
    CreateRentalSerializer,
    ReturnRentalSerializer,
    ReturnResultSerializer,
    CostEstimateSerializer,
)

from apps.accounts.services import Caller
from apps.core.exceptions import SwapServiceError
from apps.core.responses import error_response
from apps.rentals.services import (
    create_rental,
    return_rental,
    cancel_rental,
    get_rental,
    list_rentals,
    estimate_cost,
)
from apps.payments.services import record_payment


class RentalPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class RentalViewSet(viewsets.GenericViewSet):
    """
    Battery rentals.

    list: Rentals visible to the caller (own rentals for customers)
    retrieve: A single rental
    create: Rent (swap) a battery
    return: Return the battery and close the rental
    cancel: Cancel an active rental
    estimate: Cost of the rental so far
    """

    serializer_class = RentalSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = RentalPagination

    def get_caller(self):
        return Caller.from_user(self.request.user)

    @extend_schema(
        parameters=[RentalFilterSerializer],
        responses={200: RentalSerializer(many=True)},
    )
    def list(self, request):
        filter_serializer = RentalFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        queryset = list_rentals(
            caller=self.get_caller(),
            status=params.get('status'),
            user_id=params.get('user_id'),
        )

        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = RentalSerializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = RentalSerializer(queryset, many=True)
        return Response(serializer.data)

    @extend_schema(responses={200: RentalSerializer})
    def retrieve(self, request, pk=None):
        try:
            rental = get_rental(rental_id=pk, caller=self.get_caller())
        except SwapServiceError as e:
            return error_response(e)

        return Response(RentalSerializer(rental).data)

    @extend_schema(
        request=CreateRentalSerializer,
        responses={201: RentalSerializer},
    )
    def create(self, request):
        """
        Rent a battery for the authenticated user.

        POST /api/rentals/
        Body: {"battery_id": "...", "pickup_station_id": "..."}
        """
        serializer = CreateRentalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            rental = create_rental(
                user_id=request.user.id,
                battery_id=serializer.validated_data['battery_id'],
                pickup_station_id=serializer.validated_data['pickup_station_id'],
            )
        except SwapServiceError as e:
            return error_response(e)

        rental = get_rental(rental_id=rental.id, caller=self.get_caller())
        return Response(RentalSerializer(rental).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=ReturnRentalSerializer,
        responses={200: ReturnResultSerializer},
    )
    @action(detail=True, methods=['patch'], url_path='return', url_name='return')
    def return_battery(self, request, pk=None):
        """
        Return the battery at a station and close the rental.

        PATCH /api/rentals/{id}/return/
        Body: {"return_station_id": "...", "payment_method": "mpesa"}

        When ``payment_method`` is given a pending payment for the final cost
        is recorded for the renter.
        """
        serializer = ReturnRentalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            response_data = self._return_and_settle(
                rental_id=pk,
                return_station_id=serializer.validated_data['return_station_id'],
                payment_method=serializer.validated_data.get('payment_method'),
            )
        except SwapServiceError as e:
            return error_response(e)

        return Response(ReturnResultSerializer(response_data).data)

    @transaction.atomic
    def _return_and_settle(self, rental_id, return_station_id, payment_method=None):
        """Return the rental and, if asked, record its payment in the same transaction."""
        caller = self.get_caller()
        result = return_rental(
            rental_id=rental_id,
            return_station_id=return_station_id,
            caller=caller,
        )
        rental = result['rental']
        response_data = {
            'rental_hours': result['rental_hours'],
            'total_cost': result['total_cost'],
        }

        if payment_method:
            payment = record_payment(
                caller=caller,
                user_id=rental.user_id,
                rental_id=rental.id,
                amount=result['total_cost'],
                payment_method=payment_method,
                description=f'Battery rental {rental.id}',
            )
            response_data['payment_id'] = payment.id

        return response_data

    @extend_schema(request=None, responses={200: RentalSerializer})
    @action(detail=True, methods=['patch'])
    def cancel(self, request, pk=None):
        """
        Cancel an active rental.

        PATCH /api/rentals/{id}/cancel/
        """
        try:
            rental = cancel_rental(rental_id=pk, caller=self.get_caller())
        except SwapServiceError as e:
            return error_response(e)

        return Response(RentalSerializer(rental).data)

    @extend_schema(responses={200: CostEstimateSerializer})
    @action(detail=True, methods=['get'])
    def estimate(self, request, pk=None):
        """
        Cost of the rental so far, or its final cost once returned.

        GET /api/rentals/{id}/estimate/
        """
        try:
            rental = get_rental(rental_id=pk, caller=self.get_caller())
            hours, cost = estimate_cost(rental)
        except SwapServiceError as e:
            return error_response(e)

        serializer = CostEstimateSerializer({
            'rental_id': rental.id,
            'status': rental.status,
            'hours': hours,
            'hourly_rate': rental.hourly_rate,
            'estimated_cost': cost,
        })
        return Response(serializer.data)
