"""SpaceX launch archive: offline catalog sync + online live/snapshot merge."""

__version__ = "1.0.0"
