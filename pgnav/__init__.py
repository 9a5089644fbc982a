"""pgnav: fuzzy-searchable terminal navigator for PostgreSQL catalogs."""

__version__ = "0.1.0"
