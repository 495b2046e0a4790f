"""User notifier implementations."""

import inspect
from typing import Any, Awaitable, Callable, Union

from structlog import get_logger

from fieldgate.domain.interfaces.notifier import IUserNotifier

logger = get_logger(__name__)


class LoggingNotifier(IUserNotifier):
    """Default notifier for headless use: writes the message to the log."""

    async def notify(self, title: str, message: str) -> None:
        await logger.awarning("User notification", title=title, message=message)


class CallbackNotifier(IUserNotifier):
    """Adapts a UI callable ``callback(title, message)``; sync and async callables both work."""

    def __init__(self, callback: Callable[[str, str], Union[Awaitable[Any], Any]]):
        self._callback = callback

    async def notify(self, title: str, message: str) -> None:
        result = self._callback(title, message)
        if inspect.isawaitable(result):
            await result
