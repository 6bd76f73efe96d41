"""PICKPUSH: pick changes, stage them, commit and push."""

from pickpush.identity import __version__

__all__ = ["__version__"]
