"""aic-art - Art Institute of Chicago artwork rendered as terminal text."""

__version__ = "0.1.0"

"""
Keep package import light: the CLI pulls in requests, Pillow and numpy, so it
is imported on demand rather than at package import time.
"""


def main(*args, **kwargs):
    from .cli import main as _m

    return _m(*args, **kwargs)


__all__ = [
    "main",
]
