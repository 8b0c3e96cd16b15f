"""API views for the booking domain."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from drf_spectacular.utils import OpenApiParameter, extend_schema  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.rates.services import settings_store
from shared.api.permissions import IsGroundStaff
from shared.application.message_bus import message_bus
from shared.domain.exceptions import ValidationError

from .application.queries import CalendarProjector, SlotAvailabilityIndex, lookup_bookings
from .domain.availability import elapsed_hours
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    ApproveSerializer,
    BookingCreateSerializer,
    BookingHoursSerializer,
    BookingSerializer,
    CompleteSerializer,
    ExtraChargeCreateSerializer,
    ManualBookingSerializer,
    PaymentCreateSerializer,
    PublicBookingSerializer,
    RejectSerializer,
    ReserveSerializer,
    SlotQuerySerializer,
)
from .services import slot_reservations


class SlotAvailabilityView(APIView):
    """Public 24-slot view of one day."""

    permission_classes = [permissions.AllowAny]
    index = SlotAvailabilityIndex(settings_store)

    @extend_schema(parameters=[OpenApiParameter("date", str, required=True, description="YYYY-MM-DD")])
    def get(self, request):  # type: ignore
        query = SlotQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        slot_date = query.validated_data["date"]
        slots = self.index.public_slots_for(slot_date)
        return Response({
            "date": slot_date.isoformat(),
            "slots": [slot.to_dict() for slot in slots],
        })


class SlotReserveView(APIView):
    """
    Locked conflict check for a set of hours.

    Nothing is held by this call; hours are only reserved when a booking
    is submitted.
    """

    permission_classes = [permissions.AllowAny]

    @extend_schema(request=ReserveSerializer)
    def post(self, request):  # type: ignore
        serializer = ReserveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        slot_date = serializer.validated_data["date"]
        hours = serializer.validated_data["hours"]
        now = timezone.localtime()
        if slot_date < now.date():
            raise ValidationError("Date cannot be in the past.", field="date")
        elapsed = elapsed_hours(slot_date, hours, now)
        if elapsed:
            raise ValidationError("Some of the selected hours have already passed.", field="hours", hours=elapsed)
        result = slot_reservations.reserve(slot_date, hours)
        return Response({"accepted": result.accepted, "conflicts": list(result.conflicts)})


class BookingViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    Bookings: public submission and lookup, staff listing and lifecycle actions.
    """

    queryset = (
        Booking.objects.select_related("customer")
        .prefetch_related("slots", "payments", "extra_charges")
        .all()
    )
    serializer_class = BookingSerializer
    filterset_class = BookingFilterSet
    ordering_fields = ["created_at", "booking_date", "total_amount"]
    ordering = ["-created_at"]

    def get_permissions(self):  # type: ignore
        if self.action in ("create", "lookup"):
            return [permissions.AllowAny()]
        return [IsGroundStaff()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(serializer.to_command())
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    @extend_schema(request=ManualBookingSerializer, responses=BookingSerializer)
    @action(detail=False, methods=["post"])
    def manual(self, request):  # type: ignore
        serializer = ManualBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(serializer.to_command())
        return Response(
            BookingSerializer(booking, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"])
    def lookup(self, request):  # type: ignore
        bookings = lookup_bookings(request.query_params.get("phone", ""))
        return Response(PublicBookingSerializer(bookings, many=True).data)

    def _run(self, request, serializer_class, *args):  # type: ignore
        serializer = serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(serializer.to_command(self.kwargs["pk"], *args))
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    @extend_schema(request=ApproveSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["patch"])
    def approve(self, request, pk=None):  # type: ignore
        return self._run(request, ApproveSerializer)

    @extend_schema(request=RejectSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["patch"])
    def reject(self, request, pk=None):  # type: ignore
        return self._run(request, RejectSerializer)

    @extend_schema(request=CompleteSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["patch"])
    def complete(self, request, pk=None):  # type: ignore
        return self._run(request, CompleteSerializer)

    @extend_schema(request=BookingHoursSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["patch"])
    def hours(self, request, pk=None):  # type: ignore
        return self._run(request, BookingHoursSerializer)

    @extend_schema(request=PaymentCreateSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["post"])
    def payments(self, request, pk=None):  # type: ignore
        return self._run(request, PaymentCreateSerializer, request.user)

    @extend_schema(request=ExtraChargeCreateSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["post"])
    def charges(self, request, pk=None):  # type: ignore
        return self._run(request, ExtraChargeCreateSerializer, request.user)


class CalendarView(APIView):
    """Staff calendar: one event per booking with merged hour ranges."""

    permission_classes = [IsGroundStaff]
    projector = CalendarProjector()

    @extend_schema(
        parameters=[
            OpenApiParameter("start", str, description="YYYY-MM-DD, default today"),
            OpenApiParameter("end", str, description="YYYY-MM-DD, default today + 30 days"),
            OpenApiParameter("status", str, description="pending, approved, completed or cancelled"),
        ]
    )
    def get(self, request):  # type: ignore
        params = request.query_params
        start = self._parse_date(params.get("start"), "start")
        end = self._parse_date(params.get("end"), "end")
        window = self.projector.window(start, end, params.get("status") or None)
        events = [event.to_dict() for event in self.projector.events_for(window.start, window.end, window.status)]
        return Response({"events": events, "count": len(events), "filters": window.to_dict()})

    @staticmethod
    def _parse_date(value, field):  # type: ignore
        if not value:
            return None
        query = SlotQuerySerializer(data={"date": value})
        if not query.is_valid():
            raise ValidationError(f"{field} must be a date (YYYY-MM-DD).", field=field)
        return query.validated_data["date"]
