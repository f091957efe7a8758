"""Rotation Domain Ports (Interfaces)."""
from abc import ABC, abstractmethod

from rotator.domain.models import Target


class PasswordChanger(ABC):
    """Abstract Port for setting a remote account's password."""

    @abstractmethod
    async def change_password(self, target: Target, remote_username: str, new_password: str) -> None:
        """Apply ``new_password`` to ``remote_username`` on ``target``.

        Returns only when the remote side confirmed the change. Raises
        TransportFailure or ProtocolFailure otherwise.
        """
        ...
