# (c) Copyright Datacraft, 2026
"""Authorization rules for custody mutations.

Every check runs before any backend is touched and raises ForbiddenError.
"""
from trustdoc.core.exceptions import ForbiddenError
from trustdoc.core.features.documents.schema import Document
from trustdoc.core.types import RoleType


def _role(requester_role: int | RoleType) -> RoleType:
	try:
		return RoleType(requester_role)
	except ValueError as e:
		raise ForbiddenError(f"Unknown role: {requester_role}", e) from e


def ensure_owner(document: Document, requester_id: str) -> None:
	if document.owner_id != requester_id:
		raise ForbiddenError("Only the document owner may perform this operation")


def ensure_can_delete(
	document: Document,
	requester_id: str,
	requester_role: int | RoleType,
) -> None:
	"""Only the owner, acting under the least-privileged role, may delete.

	Elevated roles cannot delete on behalf of others.
	"""
	if _role(requester_role) != RoleType.USER:
		raise ForbiddenError("Deletion is reserved to document owners with the user role")
	ensure_owner(document, requester_id)


def ensure_can_restore(
	document: Document,
	requester_id: str,
	requester_role: int | RoleType,
) -> None:
	role = _role(requester_role)
	if role == RoleType.SUPER_ADMIN:
		return
	if role != RoleType.USER:
		raise ForbiddenError("Restore is reserved to document owners and super administrators")
	ensure_owner(document, requester_id)


def ensure_can_hard_delete(requester_role: int | RoleType) -> None:
	if _role(requester_role) != RoleType.SUPER_ADMIN:
		raise ForbiddenError("Permanent deletion is reserved to super administrators")
