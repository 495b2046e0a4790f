"""Single-flight access token refresh.

When the access token expires every in-flight request starts failing with
401 at roughly the same time. The coordinator makes sure exactly one refresh
call reaches the backend: the first caller becomes the leader and performs the
refresh, every later caller is parked on a FIFO wait-list and receives the
leader's outcome (the new access token, or the same error).

All state changes happen on one event loop. `acquire` performs the
"is a refresh in flight" check and the transition to REFRESHING without an
await in between, so two concurrent 401s can never both become leaders.
"""

import asyncio
import enum
from collections import deque
from typing import Awaitable, Callable, Deque, Optional

from structlog import get_logger

from fieldgate.core.exceptions import RefreshCancelledError, SessionExpiredError
from fieldgate.domain.interfaces.credential_store import ICredentialStore
from fieldgate.domain.value_objects.token_set import TokenSet

logger = get_logger(__name__)

Refresher = Callable[[str], Awaitable[TokenSet]]


class RefreshState(str, enum.Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class RefreshCoordinator:
    """Guarantees at most one concurrent token refresh and fans its result out.

    Attributes:
        credential_store: Where the refresh token is read and the new token set written.
        refresher: Coroutine function exchanging a refresh token for a `TokenSet`.
        timeout: Upper bound in seconds for one refresh call; None disables it.
        refresh_count: Number of refresh calls issued, for diagnostics.
    """

    def __init__(
        self,
        credential_store: ICredentialStore,
        refresher: Refresher,
        timeout: Optional[float] = 15.0,
    ):
        self.credential_store = credential_store
        self.refresher = refresher
        self.timeout = timeout
        self.refresh_count = 0
        self._state = RefreshState.IDLE
        self._waiters: Deque[asyncio.Future] = deque()

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def is_refreshing(self) -> bool:
        return self._state is RefreshState.REFRESHING

    @property
    def pending_waiters(self) -> int:
        return len(self._waiters)

    def acquire(self) -> bool:
        """Try to become the refresh leader.

        Returns:
            True if the coordinator moved from IDLE to REFRESHING and the caller
            must run the refresh, False if a refresh is already in flight.
        """
        if self._state is RefreshState.REFRESHING:
            return False
        self._state = RefreshState.REFRESHING
        return True

    async def wait(self) -> str:
        """Park until the in-flight refresh settles.

        Returns:
            The new access token.

        Raises:
            AuthenticationError: The error the refresh settled with.
        """
        if self._state is not RefreshState.REFRESHING:
            raise RuntimeError("No token refresh in flight")
        future = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        return await future

    def release(self, access_token: Optional[str] = None, error: Optional[BaseException] = None) -> int:
        """Settle every waiter exactly once, in FIFO order, and return to IDLE.

        Exactly one of ``access_token`` and ``error`` is expected.

        Returns:
            The number of waiters that were settled.
        """
        if (access_token is None) == (error is None):
            raise ValueError("release() needs either an access token or an error")
        waiters, self._waiters = self._waiters, deque()
        self._state = RefreshState.IDLE
        settled = 0
        for future in waiters:
            # Waiters whose task was cancelled have nobody left to inform
            if future.done():
                continue
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(access_token)
            settled += 1
        return settled

    async def refresh(self) -> str:
        """Obtain a fresh access token, sharing one refresh between all callers.

        Returns:
            The new access token.

        Raises:
            SessionExpiredError: No refresh token is stored, or the refresh call
                failed or timed out. Persisted tokens are cleared first.
            RefreshCancelledError: Raised to waiters when the leader is cancelled.
        """
        if not self.acquire():
            logger.debug("Token refresh in flight, queueing request", waiters=len(self._waiters) + 1)
            return await self.wait()

        try:
            refresh_token = await self.credential_store.get_refresh_token()
            if not refresh_token:
                error = SessionExpiredError("No refresh token available, please log in again")
                logger.info("No refresh token stored, session terminated")
                await self._fail(error)
                raise error

            self.refresh_count += 1
            logger.info("Refreshing access token", attempt=self.refresh_count)
            try:
                token_set = await asyncio.wait_for(self.refresher(refresh_token), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                raise SessionExpiredError(f"Token refresh timed out after {self.timeout} seconds") from e
            await self.credential_store.save(token_set)
        except asyncio.CancelledError:
            if self.is_refreshing:
                self.release(error=RefreshCancelledError())
            raise
        except SessionExpiredError as e:
            if self.is_refreshing:
                await self._fail(e)
            raise
        except Exception as e:
            error = SessionExpiredError(f"Token refresh failed: {e}")
            await self._fail(error)
            raise error from e

        released = self.release(access_token=token_set.access_token)
        logger.info("Access token refreshed", released_waiters=released)
        return token_set.access_token

    async def _fail(self, error: BaseException) -> None:
        # Tokens are gone before any waiter resumes; 401s arriving meanwhile still queue.
        # Waiters are released even if the clear is cancelled.
        try:
            await self.credential_store.clear_tokens()
        finally:
            released = self.release(error=error)
        logger.warning("Token refresh failed, session terminated", error=str(error), released_waiters=released)
