"""Logo gallery upload pipeline with duplicate and similarity detection."""

__version__ = "0.1.0"
