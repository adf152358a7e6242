"""Offer API views.

Public endpoints (checkout):
- ``GET  /api/v1/offers/``          eligible offers for a customer/subtotal.
- ``POST /api/v1/offers/validate/`` validate a code and compute the discount.

Staff endpoints (elevated roles):
- ``/api/v1/admin/offers/`` CRUD.

Domain exceptions propagate to ``api_exception_handler``, which renders
the specific failure reason.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.offers.dtos import (
    CreateOfferDTO,
    EligibleOffersQueryDTO,
    UpdateOfferDTO,
    ValidateOfferDTO,
)
from modules.offers.models import Offer
from modules.offers.repositories.django_repository import OfferDjangoRepository
from modules.offers.serializers import (
    EligibleOffersQuerySerializer,
    OfferSerializer,
    OfferWriteSerializer,
    ValidatedOfferSerializer,
    ValidateOfferSerializer,
)
from modules.offers.services import OfferService, OfferValidator
from modules.staff.permissions import IsStaffMember


class EligibleOffersView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def get(self, request: Request) -> Response:
        query = EligibleOffersQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        dto = EligibleOffersQueryDTO(**query.validated_data)
        eligible = OfferValidator(OfferDjangoRepository()).get_eligible_offers(
            dto.to_identity(), dto.subtotal
        )
        return Response(
            {"offers": ValidatedOfferSerializer(eligible, many=True).data}
        )


class ValidateOfferView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request: Request) -> Response:
        serializer = ValidateOfferSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = ValidateOfferDTO(**serializer.validated_data)
        validated = OfferValidator(OfferDjangoRepository()).validate(
            dto.lookup, dto.subtotal, dto.to_identity()
        )
        return Response(ValidatedOfferSerializer(validated).data)


class OfferAdminViewSet(GenericViewSet):
    """Offer administration for elevated staff."""

    queryset = Offer.objects.all()
    permission_classes = [IsStaffMember]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OfferService(OfferDjangoRepository())

    def list(self, request: Request) -> Response:
        offers = self._service.list_offers(request.actor)
        return Response(OfferSerializer(offers, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        offer = self._service.get_offer_for(pk, request.actor)
        return Response(OfferSerializer(offer).data)

    def create(self, request: Request) -> Response:
        serializer = OfferWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        offer = self._service.create_offer(
            CreateOfferDTO(**serializer.validated_data), request.actor
        )
        return Response(OfferSerializer(offer).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        serializer = OfferWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        offer = self._service.update_offer(
            pk, UpdateOfferDTO(**serializer.validated_data), request.actor
        )
        return Response(OfferSerializer(offer).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        self._service.delete_offer(pk, request.actor)
        return Response(status=status.HTTP_204_NO_CONTENT)
