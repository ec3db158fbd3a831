"""Collection runtime: the bulk-operation interface and execution hints."""

from cellmatrix.runtime.collection import Collection, LocalCollection
from cellmatrix.runtime.tuner import DEFAULT_TUNER, Strategy, Tuner

__all__ = ['Collection', 'LocalCollection', 'Strategy', 'Tuner', 'DEFAULT_TUNER']
