"""Unit tests for booking entity state transitions (State Pattern)."""

import pytest

from chauffeur.domain.entities import Booking, Hourly, PointToPoint
from chauffeur.domain.enums import (
    BOOKING_TRANSITIONS,
    TERMINAL_STATUSES,
    BookingKind,
    BookingStatus,
)
from chauffeur.domain.errors import InvalidTransition
from tests.conftest import PICKUP_TIME


def _booking(status=BookingStatus.PENDING) -> Booking:
    return Booking(
        client_id="client-1",
        itinerary=PointToPoint(pickup="123 Main St", dropoff="Airport"),
        pickup_time=PICKUP_TIME,
        status=status,
    )


class TestBookingStateMachine:
    def test_initial_status_is_pending(self):
        booking = _booking()
        assert booking.status == BookingStatus.PENDING
        assert booking.driver_id is None

    # ── Valid transitions ─────────────────────────────────────────

    def test_pending_to_confirmed(self):
        booking = _booking()
        booking.transition_to(BookingStatus.CONFIRMED)
        assert booking.status == BookingStatus.CONFIRMED

    def test_confirmed_back_to_pending(self):
        booking = _booking(BookingStatus.CONFIRMED)
        booking.transition_to(BookingStatus.PENDING)
        assert booking.status == BookingStatus.PENDING

    def test_confirmed_to_in_progress(self):
        booking = _booking(BookingStatus.CONFIRMED)
        booking.transition_to(BookingStatus.IN_PROGRESS)
        assert booking.status == BookingStatus.IN_PROGRESS

    def test_in_progress_to_completed(self):
        booking = _booking(BookingStatus.IN_PROGRESS)
        booking.transition_to(BookingStatus.COMPLETED)
        assert booking.status == BookingStatus.COMPLETED

    @pytest.mark.parametrize(
        "status",
        [BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS],
    )
    def test_any_non_terminal_to_cancelled(self, status):
        booking = _booking(status)
        booking.transition_to(BookingStatus.CANCELLED)
        assert booking.status == BookingStatus.CANCELLED

    # ── Invalid transitions ───────────────────────────────────────

    def test_pending_to_in_progress_fails(self):
        booking = _booking()
        with pytest.raises(InvalidTransition):
            booking.transition_to(BookingStatus.IN_PROGRESS)
        assert booking.status == BookingStatus.PENDING

    def test_in_progress_back_to_confirmed_fails(self):
        booking = _booking(BookingStatus.IN_PROGRESS)
        with pytest.raises(InvalidTransition):
            booking.transition_to(BookingStatus.CONFIRMED)

    @pytest.mark.parametrize(
        "status", [BookingStatus.COMPLETED, BookingStatus.CANCELLED]
    )
    def test_terminal_states_are_final(self, status):
        booking = _booking(status)
        assert booking.is_terminal
        for target in BookingStatus:
            with pytest.raises(InvalidTransition):
                booking.transition_to(target)

    def test_terminal_statuses_match_transition_table(self):
        for status in BookingStatus:
            terminal = status in TERMINAL_STATUSES
            assert _booking(status).is_terminal == terminal
            assert terminal == (not BOOKING_TRANSITIONS.get(status))


class TestItinerary:
    def test_point_to_point_carries_dropoff(self):
        itinerary = PointToPoint(
            pickup="South Station", dropoff="Harvard", stops=("Fenway",)
        )
        assert itinerary.kind == BookingKind.POINT_TO_POINT
        assert itinerary.dropoff_label == "Harvard"

    def test_hourly_has_synthetic_dropoff(self):
        booking = Booking(
            client_id="client-1",
            itinerary=Hourly(pickup="Museum of Fine Arts", duration_hours=4),
            pickup_time=PICKUP_TIME,
        )
        assert booking.kind == BookingKind.HOURLY
        assert booking.pickup_location == "Museum of Fine Arts"
        assert booking.dropoff_location == "As Directed for 4 hours"
