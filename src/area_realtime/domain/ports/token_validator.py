"""Token validation port."""

from typing import Protocol


class TokenValidator(Protocol):
    """Port for resolving an access token to a user id."""

    async def validate_token(self, token: str) -> str:
        """Return the user id the token was issued to.

        Raises:
            UnauthenticatedError: If the token is missing, expired or unknown.
        """
        ...
