"""
Spotify module for spot-importer.

    - client: SpotifyClient, the remote calls used by the import pipeline
    - auth: OAuth2 authorization-code / refresh-token authentication
"""

from spot_importer.spotify.auth import Authentication, authenticate
from spot_importer.spotify.client import ADD_ITEMS_LIMIT, SpotifyClient

__all__ = [
    "ADD_ITEMS_LIMIT",
    "Authentication",
    "SpotifyClient",
    "authenticate",
]
