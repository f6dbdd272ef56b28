"""
Latest Articles - a content block listing the most recently published articles.

Queries a content store for published "article" items, renders them as a list
of links and carries a configurable display count and cache lifetime.
"""

__version__ = "0.1.0"
