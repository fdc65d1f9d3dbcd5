from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from storeguard.domain.entities import AuthProvider


class IdentityVerificationError(Exception):
    pass


class IdentityProviderUnavailable(IdentityVerificationError):
    """The provider is not configured or its signing keys could not be fetched."""


@dataclass(frozen=True)
class FederatedIdentity:
    provider: AuthProvider
    subject: str
    email: str
    full_name: Optional[str] = None


class IIdentityVerifier(ABC):
    """Identity provider ID token collaborator - application layer"""

    provider: AuthProvider

    @abstractmethod
    async def verify(self, id_token: str) -> FederatedIdentity:
        """
        Check an ID token's signature, audience, issuer and expiry.

        Raises:
            IdentityProviderUnavailable: the provider cannot be used right now
            IdentityVerificationError: the token is not acceptable
        """
        pass
