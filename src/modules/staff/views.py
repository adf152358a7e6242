"""Staff API views: the caller's own identity and the worker directory."""

from __future__ import annotations

from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.staff.constants import StaffRole
from modules.staff.permissions import IsStaffMember
from modules.staff.repositories.django_repository import StaffDjangoRepository
from modules.staff.serializers import StaffMemberSerializer


class MeView(APIView):
    """GET /api/v1/staff/me -> the resolved actor."""

    permission_classes = [IsStaffMember]

    def get(self, request: Request) -> Response:
        actor = request.actor
        return Response(
            {"id": actor.id, "role": actor.role, "is_elevated": actor.is_elevated}
        )


class WorkerDirectoryView(APIView):
    """GET /api/v1/staff/workers -> active workers available for assignment."""

    permission_classes = [IsStaffMember]

    def get(self, request: Request) -> Response:
        workers = StaffDjangoRepository().list_active(role=StaffRole.WORKER)
        return Response(StaffMemberSerializer(workers, many=True).data)
