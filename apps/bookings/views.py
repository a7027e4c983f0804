"""API views for the booking domain."""

from __future__ import annotations

from django.http import HttpResponse  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.application.message_bus import message_bus
from shared.domain.exceptions import DomainError

from .application.checkin import CheckInBookingCommand
from .application.command_handlers import (
    CancelBookingCommand,
    ConfirmBookingCommand,
    DeleteBookingCommand,
)
from .application.queries import get_booking, get_booking_by_session, list_bookings
from .domain.ownership import handles_match
from .ics import CONTENT_TYPE, export_booking_event
from .serializers import (
    BookingCreateSerializer,
    BookingPublicSerializer,
    BookingSerializer,
    CheckinSerializer,
    HandleSerializer,
)

PUBLIC_ACTIONS = {"create", "retrieve", "by_session", "ics"}


class BookingViewSet(viewsets.GenericViewSet):
    """
    Public booking page and provider dashboard endpoints.

    Provider requests carry the provider ``handle``; the lifecycle handlers
    compare it with the booking and slot on every mutating call.
    """

    serializer_class = BookingSerializer
    lookup_value_regex = r"\d+"

    def get_permissions(self):  # type: ignore
        if self.action in PUBLIC_ACTIONS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def handle_exception(self, exc):  # type: ignore
        if isinstance(exc, DomainError):
            return Response(exc.as_dict(), status=exc.status_code)
        return super().handle_exception(exc)

    def _handle(self, request) -> str:
        serializer = HandleSerializer(data={"handle": request.query_params.get("handle") or request.data.get("handle")})
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data["handle"]

    def list(self, request):  # type: ignore
        bookings = list_bookings(self._handle(request))
        return Response(BookingSerializer(bookings, many=True).data)

    def create(self, request):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(serializer.to_command())

        data = BookingPublicSerializer(booking).data
        data["checkin_code"] = booking.checkin_code
        return Response(data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):  # type: ignore
        booking = get_booking(int(pk))
        handle = request.query_params.get("handle")
        if request.user.is_authenticated and handle and handles_match(handle, booking.handle):
            return Response(BookingSerializer(booking).data)
        return Response(BookingPublicSerializer(booking).data)

    def destroy(self, request, pk=None):  # type: ignore
        message_bus.handle_command(DeleteBookingCommand(booking_id=int(pk), handle=self._handle(request)))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(ConfirmBookingCommand(booking_id=int(pk), handle=self._handle(request)))
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(CancelBookingCommand(booking_id=int(pk), handle=self._handle(request)))
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def checkin(self, request, pk=None):  # type: ignore
        serializer = CheckinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = message_bus.handle_command(CheckInBookingCommand(
            booking_id=int(pk),
            handle=serializer.validated_data["handle"],
            code=serializer.validated_data.get("code"),
        ))
        return Response(
            {
                "ok": result.ok,
                "outcome": result.outcome.value,
                "booking": BookingSerializer(result.booking).data,
            },
            status=status.HTTP_200_OK if result.ok else status.HTTP_409_CONFLICT,
        )

    @action(detail=True, methods=["get"])
    def ics(self, request, pk=None):  # type: ignore
        event = export_booking_event(int(pk))
        response = HttpResponse(event.content, content_type=CONTENT_TYPE)
        response["Content-Disposition"] = f'attachment; filename="{event.filename}"'
        return response

    @action(detail=False, methods=["get"], url_path="by-session")
    def by_session(self, request):  # type: ignore
        booking = get_booking_by_session(request.query_params.get("session_id", ""))
        return Response(BookingPublicSerializer(booking).data)
