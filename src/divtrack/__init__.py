"""DivTrack - divination card farming session tracker."""

from divtrack.version import __version__

__all__ = ["__version__"]
