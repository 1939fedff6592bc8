"""Event page scraper: URL → normalized event record + confidence."""

__version__ = "0.1.0"
