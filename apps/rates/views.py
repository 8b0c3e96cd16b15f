"""API views for rate settings."""

from __future__ import annotations

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.api.permissions import IsGroundStaffOrReadOnly

from .serializers import RateSettingsSerializer, RateSettingsUpdateSerializer
from .services import settings_store


class RateSettingsView(APIView):
    """Current rates are public; only staff may change them."""

    permission_classes = [IsGroundStaffOrReadOnly]

    def get(self, request):  # type: ignore
        return Response(RateSettingsSerializer(settings_store.get()).data)

    def patch(self, request):  # type: ignore
        serializer = RateSettingsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = settings_store.update(serializer.validated_data, actor=request.user)
        return Response(RateSettingsSerializer(updated).data, status=status.HTTP_200_OK)
