"""Offer URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.offers.views import EligibleOffersView, OfferAdminViewSet, ValidateOfferView

router = DefaultRouter(trailing_slash=True)
router.register("admin/offers", OfferAdminViewSet, basename="admin-offer")

urlpatterns = [
    path("offers/", EligibleOffersView.as_view(), name="offer-eligible"),
    path("offers/validate/", ValidateOfferView.as_view(), name="offer-validate"),
    *router.urls,
]
