"""Offer repositories package (the OfferStore)."""

from modules.offers.repositories.django_repository import OfferDjangoRepository
from modules.offers.repositories.interfaces import IOfferRepository

__all__ = ["IOfferRepository", "OfferDjangoRepository"]
