"""Building blocks of a terminal download manager: records, storage, workers and rendering."""

__version__ = "0.1.0"