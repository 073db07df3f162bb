"""Application-wide constants for SimBay."""

from __future__ import annotations

from datetime import timedelta

BRAND_NAME = "SimBay Golf Club"

# Facility bays
SIMULATORS = ("east", "west")
BOOKING_DURATION = timedelta(hours=2)

# Text constraints
MAX_NAME_LENGTH = 120
MAX_SUBJECT_LENGTH = 200
MAX_MESSAGE_LENGTH = 5000
MAX_DESCRIPTION_LENGTH = 500

# Constraint names used to map storage-level conflicts back to slot conflicts
BOOKING_UNIQUE_START_CONSTRAINT = "uq_bookings_simulator_start"
BOOKING_EXCLUSION_CONSTRAINT = "bookings_no_overlap_per_simulator"
