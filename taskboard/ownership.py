"""Single ownership predicate used by every resource handler.

Handlers differ in how they report a foreign resource: reads and deletes
answer 404 so other users' ids are not confirmed, updates answer 403.
"""

import enum
from typing import Any, Callable, Optional

from .exceptions import ForbiddenError, NotFoundError


class Ownership(enum.Enum):
    OWNER = "owner"
    NOT_OWNER = "not_owner"
    NOT_FOUND = "not_found"


def check_ownership(
    resource: Optional[Any],
    caller_id: str,
    owner_of: Callable[[Any], str] = lambda resource: resource.user_id,
) -> Ownership:
    if resource is None:
        return Ownership.NOT_FOUND
    if str(owner_of(resource)) != str(caller_id):
        return Ownership.NOT_OWNER
    return Ownership.OWNER


def require_owner(
    resource: Optional[Any],
    caller_id: str,
    not_found: str,
    forbidden: Optional[str] = None,
    owner_of: Callable[[Any], str] = lambda resource: resource.user_id,
) -> Any:
    """Return ``resource`` if the caller owns it, otherwise raise.

    With ``forbidden`` unset a foreign resource is reported as not found.
    """
    outcome = check_ownership(resource, caller_id, owner_of)
    if outcome is Ownership.NOT_FOUND:
        raise NotFoundError(not_found)
    if outcome is Ownership.NOT_OWNER:
        if forbidden is None:
            raise NotFoundError(not_found)
        raise ForbiddenError(forbidden)
    return resource
