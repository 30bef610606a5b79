"""Properties app: locations, amenities, campground properties and their bookable sites."""
