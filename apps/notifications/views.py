"""API views for notifications."""

from __future__ import annotations

from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.api.permissions import IsGroundStaff

from .models import Notification
from .serializers import NotificationSerializer
from .services import mark_read


class NotificationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Admin notification feed. Notifications are created by the system only."""

    serializer_class = NotificationSerializer
    permission_classes = [IsGroundStaff]
    filterset_fields = ["is_read", "notification_type", "priority"]

    def get_queryset(self):  # type: ignore
        return Notification.objects.select_related("booking").all()

    @action(detail=True, methods=["post", "patch"])
    def read(self, request, pk=None):  # type: ignore
        notification = self.get_object()
        mark_read(Notification.objects.filter(pk=notification.pk))
        notification.refresh_from_db()
        return Response(self.get_serializer(notification).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="mark-all-read")
    def mark_all_read(self, request):  # type: ignore
        updated = mark_read(Notification.objects.all())
        return Response({"updated": updated}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):  # type: ignore
        return Response({"unread": Notification.objects.filter(is_read=False).count()})
