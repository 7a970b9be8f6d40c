"""
tarsweep - Tarsnap archive retention

Prunes dated Tarsnap archives down to a daily/weekly retention scheme.
"""

try:
    from importlib.metadata import version

    __version__ = version("tarsweep")
except Exception:
    __version__ = "0.0.0"  # Fallback for development
