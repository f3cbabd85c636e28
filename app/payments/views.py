"""
DRF views for payments app.

Endpoints:
    POST /api/v1/payments/subscriptions/ - Subscribe the current user to a project

Security:
    - Requires authentication; the subscriber is always request.user
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from payments.serializers import (
    CreateSubscriptionRequestSerializer,
    StripeConnectSubscriptionSerializer,
)
from payments.services import ConnectSubscriptionService

logger = logging.getLogger(__name__)


ERROR_STATUS = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PROJECT_NOT_READY": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "USER_NOT_READY": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "PROCESSOR_ERROR": status.HTTP_402_PAYMENT_REQUIRED,
}


class SubscriptionCreateView(APIView):
    """
    Subscribe the current user to a project's plan.

    POST /api/v1/payments/subscriptions/

    Repeating the request returns the existing subscription instead of
    creating a second one.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Subscribe to a project",
        request=CreateSubscriptionRequestSerializer,
        responses={200: StripeConnectSubscriptionSerializer},
        tags=["Payments"],
    )
    def post(self, request):
        serializer = CreateSubscriptionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ConnectSubscriptionService().find_or_create(
            project_id=serializer.validated_data["project_id"],
            user_id=request.user.id,
            quantity=serializer.validated_data["quantity"],
        ).map(lambda sub: StripeConnectSubscriptionSerializer(sub).data)

        if not result.success:
            response_status = ERROR_STATUS.get(
                result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR
            )
            if response_status >= 500:
                # Internals stay in the logs.
                return Response(
                    {"success": False, "error": "Subscription could not be created"},
                    status=response_status,
                )
            return Response(result.to_response(), status=response_status)

        return Response(result.data)
