"""
Database package for the records Lambda.

Public surface:

• `ConnectionProvider` — cached, ping-validated MySQL connections
• `SecretsClient` — Secrets Manager access for credentials
• `CredentialSet` — validated credentials schema
• `CachedValue` — explicit absent/present cache used by the provider
• The connection-layer exception hierarchy

Example:
    from records_api.database import ConnectionProvider, ConnectionProviderError
"""

from .cache import CachedValue
from .client import ConnectionProvider
from .errors import (
    ConnectionEstablishmentError,
    ConnectionProviderError,
    CredentialRetrievalError,
    LivenessProbeFailure,
    OperationError,
)
from .schemas import CredentialSet
from .secrets import SecretsClient

__all__ = [
    'CachedValue',
    'ConnectionProvider',
    'SecretsClient',
    'CredentialSet',
    'ConnectionProviderError',
    'CredentialRetrievalError',
    'ConnectionEstablishmentError',
    'LivenessProbeFailure',
    'OperationError',
]
