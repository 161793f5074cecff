"""
Authority metadata resolvers.
"""

from .authority import AuthorityResolver

__all__ = ['AuthorityResolver']
