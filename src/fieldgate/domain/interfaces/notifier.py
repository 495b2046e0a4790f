"""User notification interface."""

from abc import ABC, abstractmethod


class IUserNotifier(ABC):
    """Surface an error to the person using the application.

    The gateway client awaits `notify` before failing the call, so a UI
    implementation may block until the message is acknowledged.
    """

    @abstractmethod
    async def notify(self, title: str, message: str) -> None:
        raise NotImplementedError
