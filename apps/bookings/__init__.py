"""Bookings app: campsite stays on a property's sites, from request to checkout and refund."""
