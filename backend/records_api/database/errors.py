"""
Exception hierarchy for the database connection layer.

Every failure the records Lambda can hit while talking to Secrets Manager
or MySQL is expressed as a subclass of :class:`ConnectionProviderError`, so
the request boundary can catch one type and turn it into a 500 response.

* ``CredentialRetrievalError``     – secret unreachable or unparsable
* ``ConnectionEstablishmentError`` – connect/auth failure or timeout
* ``LivenessProbeFailure``         – cached connection failed its ping
* ``OperationError``               – a query failed on a live connection
"""

from __future__ import annotations


class ConnectionProviderError(RuntimeError):
    """Base class for all connection-layer failures."""


class CredentialRetrievalError(ConnectionProviderError):
    """Raised when credentials cannot be fetched or parsed from the secret store."""


class ConnectionEstablishmentError(ConnectionProviderError):
    """Raised when a new database connection cannot be opened."""


class LivenessProbeFailure(ConnectionProviderError):
    """Raised when a cached connection no longer answers a ping."""


class OperationError(ConnectionProviderError):
    """Raised when a statement fails on an otherwise healthy connection."""
