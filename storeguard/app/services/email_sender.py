from abc import ABC, abstractmethod
from datetime import datetime


class EmailDeliveryError(Exception):
    pass


class IEmailSender(ABC):
    """Outbound message collaborator - application layer"""

    @abstractmethod
    async def send_password_reset_email(
        self, email: str, reset_link: str, expires_at: datetime
    ) -> None:
        """
        Deliver a password reset link.

        Raises:
            EmailDeliveryError: the message could not be handed off
        """
        pass
