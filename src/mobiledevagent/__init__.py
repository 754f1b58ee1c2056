"""mobile-dev-agent core - canonical UI snapshots, selectors and run retention."""

__all__ = ["__version__"]

__version__ = "0.1.0"
