"""URL routing for properties."""

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import AmenityViewSet, LocationViewSet, PropertyViewSet, SiteAvailabilityViewSet, SiteViewSet

router = SimpleRouter()
router.register(r"locations", LocationViewSet, basename="location")
router.register(r"amenities", AmenityViewSet, basename="amenity")
router.register(r"properties", PropertyViewSet, basename="property")
router.register(r"sites", SiteViewSet, basename="site")

availability_list = SiteAvailabilityViewSet.as_view({"get": "list", "post": "create"})
availability_detail = SiteAvailabilityViewSet.as_view({"delete": "destroy"})

urlpatterns = [
    path("", include(router.urls)),
    path("sites/<int:site_id>/availability/", availability_list, name="site-availability-list"),
    path("sites/<int:site_id>/availability/<int:pk>/", availability_detail, name="site-availability-detail"),
]
