from abc import ABC, abstractmethod

MAX_SIGNED_URL_SECONDS = 300


class StorageSigningError(Exception):
    pass


class IStorageSigner(ABC):
    """Object storage signing collaborator - application layer"""

    @abstractmethod
    async def generate_signed_url(self, storage_key: str, expires_in: int) -> str:
        """
        Mint a GET-only link to one object, valid for at most expires_in seconds.

        Raises:
            StorageSigningError: the link could not be minted
        """
        pass
