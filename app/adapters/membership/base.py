"""Interface for the authoritative admin membership store."""

from abc import ABC, abstractmethod


class AbstractMembershipStore(ABC):
	"""Answers whether a subject has an administrator record."""

	@abstractmethod
	async def is_admin(self, subject_id: str) -> bool:
		"""Look up the administrator record for ``subject_id``.

		Args:
			subject_id: Stable id of the authenticated principal.

		Returns:
			bool: True if a record exists, False if it does not.

		Raises:
			MembershipStoreError: If the store is unreachable or answers with an error.
				"No record" is never reported as an error.
		"""
		...
