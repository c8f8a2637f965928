"""Content-addressed cache of transformed images."""

__version__ = "0.1.0"
