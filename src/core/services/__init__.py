"""
Business services for Durdle.

- pricing.py: fare calculation (pure)
- maps.py: Google Maps route lookup
- quotes.py / quote_queries.py / csv_export.py: quote calculation, admin queries, CSV export
- bookings.py: booking IDs and the status state machine
- vehicles.py / fixed_routes.py: tariffs and flat-fare routes
- comments.py, uploads.py, admin_auth.py
"""

__all__: list[str] = []
