"""authgate: session and identity gateway.

Authenticates users with local username/password credentials or by delegating to
OAuth2 identity providers (GitHub, Google, Facebook, LinkedIn), and keeps a cached
server-to-server bearer token for the Google API obtained through the service-account
JWT-bearer grant.
"""

__version__ = "0.1.0"
