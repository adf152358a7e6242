"""Task URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.fulfillment.views import TaskViewSet

router = DefaultRouter(trailing_slash=True)
router.register("tasks", TaskViewSet, basename="task")

urlpatterns = router.urls
