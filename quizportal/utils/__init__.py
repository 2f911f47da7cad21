"""Utilitarios compartilhados."""

from .validators import validate_owner_id, validate_record_id

__all__ = ["validate_owner_id", "validate_record_id"]
