"""Host application used to run shutdown coordination."""

from .application import Application

__all__ = ['Application']
