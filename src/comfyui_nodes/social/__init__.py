"""
Social media upload collaborators.
"""

from .x_client import XMediaClient

__all__ = ["XMediaClient"]
