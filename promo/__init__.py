"""promo: promote approved release branches into the production line."""

__version__ = "0.1.0"
