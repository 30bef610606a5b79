"""URL routing for tours."""

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import TourBookingViewSet, TourViewSet

router = SimpleRouter()
router.register(r"tours", TourViewSet, basename="tour")
router.register(r"tour-bookings", TourBookingViewSet, basename="tour-booking")

urlpatterns = [path("", include(router.urls))]
