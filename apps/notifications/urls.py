"""Admin notification feed routes (mounted at /api/v1/notifications/)."""

from rest_framework.routers import SimpleRouter  # type: ignore

from .views import NotificationViewSet

router = SimpleRouter()
router.register(r"", NotificationViewSet, basename="notification")

urlpatterns = router.urls
