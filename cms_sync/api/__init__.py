"""
API routers
"""

from cms_sync.api import popular_times, sanity

__all__ = ["popular_times", "sanity"]
