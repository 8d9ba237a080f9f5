"""Interface for the external authentication provider."""

from abc import ABC, abstractmethod


class AbstractAuthProvider(ABC):
	"""Maps a session access token to the subject it was issued for."""

	@abstractmethod
	async def get_subject_id(self, access_token: str) -> str | None:
		"""Validate ``access_token`` with the provider.

		Args:
			access_token: Bearer token taken from the request.

		Returns:
			str | None: Subject id, or None when the token is invalid or expired.

		Raises:
			AuthProviderError: If the provider cannot be reached.
		"""
		...
