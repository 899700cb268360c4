"""Index FLAC files in a database and reencode those written by another libFLAC version."""

__version__ = "0.1.0"