"""Utility functions for cfd-chart."""

import os.path


def extend_dict(d, e):
    """Extend dictionary d with entries from e, returning a new dictionary."""
    r = d.copy()
    r.update(e)
    return r


def get_extension(filename):
    """Get file extension from filename."""
    return os.path.splitext(filename)[1].lower()
