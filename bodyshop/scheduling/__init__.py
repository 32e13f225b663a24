"""
Booking scheduling logic:
- Time arithmetic (timeutils.py)
- Service duration aggregation (durations.py)
- Slot availability (slots.py)
- Booking status transitions (status.py)
- Booking operations (booking_flow.py)
"""
