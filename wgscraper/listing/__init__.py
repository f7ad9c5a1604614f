"""Search listings and city discovery."""

from wgscraper.listing.cities import CityIndexer, city_id_from_url
from wgscraper.listing.walker import ListingWalker

__all__ = ["CityIndexer", "ListingWalker", "city_id_from_url"]
