"""
DRF views for the payments app.

This module provides API views for:
- Checkout creation (patient)
- Wallet balances and withdrawals (practitioner)
- Payout processing (platform admin)

The Flutterwave webhook receiver is a plain Django view in
payments.webhooks.views.

Endpoints:
    POST /api/v1/payments/initiate/                       - Create checkout
    GET  /api/v1/payments/wallet/                         - Wallet balances
    GET  /api/v1/payments/withdrawals/                    - Own payouts
    POST /api/v1/payments/withdrawals/                    - Request withdrawal
    GET  /api/v1/payments/admin/payouts/pending/          - Requested payouts
    POST /api/v1/payments/admin/payouts/{id}/process/     - Record outcome

Domain errors propagate to core.exception_handler.
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiResponse, extend_schema

from authentication.permissions import IsPatient, IsPlatformAdmin, IsPractitioner
from payments.ledger import wallet_ledger
from payments.serializers import (
    CheckoutSessionSerializer,
    InitiatePaymentSerializer,
    PayoutSerializer,
    ProcessPayoutSerializer,
    WalletSerializer,
    WithdrawalRequestSerializer,
    WithdrawalResultSerializer,
)
from payments.services import PaymentInitiationService, PayoutService

logger = logging.getLogger(__name__)


class InitiatePaymentView(APIView):
    """
    Create a hosted checkout for a booked appointment.

    POST /api/v1/payments/initiate/
    """

    permission_classes = [IsAuthenticated, IsPatient]

    @extend_schema(
        operation_id="initiate_payment",
        summary="Initiate appointment payment",
        request=InitiatePaymentSerializer,
        responses={
            201: CheckoutSessionSerializer,
            404: OpenApiResponse(description="Appointment not found"),
            409: OpenApiResponse(description="Appointment not awaiting payment"),
            502: OpenApiResponse(description="Payment service unavailable"),
        },
        tags=["Payments"],
    )
    def post(self, request):
        serializer = InitiatePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        checkout = PaymentInitiationService().initiate(
            patient=request.user,
            appointment_id=data["appointment_id"],
            amount_cents=data["amount"],
            currency=data["currency"],
        )
        return Response(
            CheckoutSessionSerializer(checkout).data,
            status=status.HTTP_201_CREATED,
        )


class WalletView(APIView):
    """
    Get the practitioner's wallet, creating it on first access.

    GET /api/v1/payments/wallet/
    """

    permission_classes = [IsAuthenticated, IsPractitioner]

    @extend_schema(
        operation_id="get_wallet",
        summary="Get wallet balances",
        responses={200: WalletSerializer},
        tags=["Payments - Wallet"],
    )
    def get(self, request):
        snapshot = wallet_ledger.get_balance(request.user.id)
        return Response(WalletSerializer(snapshot).data)


class WithdrawalView(APIView):
    """
    List or request withdrawals.

    GET  /api/v1/payments/withdrawals/
    POST /api/v1/payments/withdrawals/
    """

    permission_classes = [IsAuthenticated, IsPractitioner]

    @extend_schema(
        operation_id="list_withdrawals",
        summary="List own withdrawals",
        responses={200: PayoutSerializer(many=True)},
        tags=["Payments - Wallet"],
    )
    def get(self, request):
        payouts = PayoutService().list_for_practitioner(request.user)
        return Response(PayoutSerializer(payouts, many=True).data)

    @extend_schema(
        operation_id="request_withdrawal",
        summary="Request withdrawal",
        description="Debits the available balance and queues a payout for admin processing.",
        request=WithdrawalRequestSerializer,
        responses={
            201: WithdrawalResultSerializer,
            400: OpenApiResponse(description="Below minimum or insufficient balance"),
        },
        tags=["Payments - Wallet"],
    )
    def post(self, request):
        serializer = WithdrawalRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = PayoutService().request_withdrawal(
            request.user,
            amount_cents=serializer.validated_data["amount"],
            bank_details=dict(serializer.validated_data["bank_details"]),
        )
        return Response(
            WithdrawalResultSerializer(result).data,
            status=status.HTTP_201_CREATED,
        )


class PendingPayoutsView(APIView):
    """
    List payouts awaiting processing, oldest first.

    GET /api/v1/payments/admin/payouts/pending/
    """

    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    @extend_schema(
        operation_id="list_pending_payouts",
        summary="List pending payouts",
        responses={200: PayoutSerializer(many=True)},
        tags=["Payments - Admin"],
    )
    def get(self, request):
        payouts = PayoutService().list_pending()
        return Response(PayoutSerializer(payouts, many=True).data)


class ProcessPayoutView(APIView):
    """
    Record the outcome of a payout.

    POST /api/v1/payments/admin/payouts/{id}/process/

    A failed outcome re-credits the practitioner's wallet.
    """

    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    @extend_schema(
        operation_id="process_payout",
        summary="Process payout",
        request=ProcessPayoutSerializer,
        responses={
            200: PayoutSerializer,
            404: OpenApiResponse(description="Payout not found"),
            409: OpenApiResponse(description="Payout already processed"),
        },
        tags=["Payments - Admin"],
    )
    def post(self, request, payout_id):
        serializer = ProcessPayoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payout = PayoutService().process_payout(
            payout_id,
            request.user,
            **serializer.validated_data,
        )
        return Response(PayoutSerializer(payout).data)
