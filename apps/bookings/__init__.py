"""Bookings app package.

This app encapsulates the guest-house booking record manager: the
private booking record and its public status record, the booking status
lifecycle, applicant self-service (submit, look up, cancel) and the
administrator review queue with its live feed. Both records of a booking
are always written in one database transaction.
"""
