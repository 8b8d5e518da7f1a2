"""
photojournal - public photo journal with a single-admin management API

Rows and image blobs live in Supabase; this package maps them to Photo
entities and exposes the gallery workflows over HTTP.
"""

__version__ = "1.0.0"
