"""Tours app: guided tours and seat bookings with customer manifests."""
