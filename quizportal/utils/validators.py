"""Input validators for storage keys."""

import re

from ..exceptions import InvalidOwnerIdError

_KEY_SEGMENT = re.compile(r"^[a-zA-Z0-9\-_]+$")


def validate_owner_id(owner_id: str) -> str:
    """Validate owner_id before using it as a KV partition key.

    Returns the owner_id if valid, raises InvalidOwnerIdError otherwise.
    """
    if not owner_id:
        raise InvalidOwnerIdError(message="owner_id não pode ser vazio")
    # Only allow alphanumeric with hyphens/underscores (":" separates key segments)
    if not _KEY_SEGMENT.match(owner_id):
        raise InvalidOwnerIdError(
            message="Formato de owner_id inválido",
            details={"owner_id": owner_id[:20]},
        )
    return owner_id


def validate_record_id(record_id: str) -> bool:
    """Check whether a question/result id is a safe key segment."""
    return bool(record_id) and bool(_KEY_SEGMENT.match(record_id))
