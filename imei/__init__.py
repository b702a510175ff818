"""IMEI — ImageMagick Easy Install."""

__version__ = "6.1.1"
