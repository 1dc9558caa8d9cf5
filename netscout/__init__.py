"""NETscout — concurrent TCP reachability scanner."""

__version__ = "0.1.0"
