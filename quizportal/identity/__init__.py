"""Identity - Provedor, reconciliador e artefatos locais."""

from .artifacts import LocalArtifactStore
from .provider import ExternalIdentityProvider, IdentityProvider, classify_provider_error
from .reconciler import IdentityReconciler

__all__ = [
    "ExternalIdentityProvider",
    "IdentityProvider",
    "IdentityReconciler",
    "LocalArtifactStore",
    "classify_provider_error",
]
