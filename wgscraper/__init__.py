"""Resilient, self-verifying extraction of flat ads."""

from wgscraper.scraper import Scraper

__all__ = ["Scraper"]
