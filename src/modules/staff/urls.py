from django.urls import path

from modules.staff.views import MeView, WorkerDirectoryView

urlpatterns = [
    path("staff/me", MeView.as_view(), name="staff_me"),
    path("staff/workers", WorkerDirectoryView.as_view(), name="staff_workers"),
]
