"""
Credential selection and the per-call generation context.

Paid capabilities (image and video generation) need an active provider
credential. The selection is passed explicitly into every call through a
GenerationContext instead of being read from process-wide state.
"""
import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from novacoach.core.errors import ClassifiedError, ErrorKind
from novacoach.core.logger import logger


SelectionHandler = Callable[[], Awaitable[Optional[str]]]


class CredentialSelection:
    """
    Holds the active credential and drives the selection flow.

    Lifecycle: unset -> set once a selection completes -> kept until a
    "resource not found" failure re-opens the flow.

    If a handler is given, prompt_credential_selection() awaits it for a new
    credential. Without one, it blocks until select() is called elsewhere.
    """

    def __init__(self, credential: Optional[str] = None, handler: Optional[SelectionHandler] = None):
        self._credential = credential or None
        self._handler = handler
        self._stale = False
        self._selected = asyncio.Event()
        if self._credential:
            self._selected.set()

    @property
    def active_credential(self) -> Optional[str]:
        return self._credential if not self._stale else None

    async def has_active_credential(self) -> bool:
        return self.active_credential is not None

    def select(self, credential: Optional[str]) -> None:
        """Complete a selection with the credential the user picked."""
        if not credential:
            return
        self._credential = credential
        self._stale = False
        self._selected.set()

    async def prompt_credential_selection(self) -> None:
        """Run the selection flow and wait until it resolves."""
        logger.info("Credential selection requested")
        if self._handler is not None:
            self.select(await self._handler())
            return
        self._selected.clear()
        await self._selected.wait()

    async def reopen_selection(self) -> None:
        """
        Give the user a chance to pick a different credential.

        With a handler the new choice is applied now; otherwise the current
        one is marked stale so the next paid call blocks on selection.
        """
        logger.warning("Re-opening credential selection after a not-found failure")
        if self._handler is not None:
            self.select(await self._handler())
            return
        self._stale = True
        self._selected.clear()


@dataclass
class GenerationContext:
    """Everything a generation call needs from its caller."""

    credentials: CredentialSelection
    # Service key used by calls that do not need a user-selected credential.
    default_credential: Optional[str] = None

    def credential_for(self, paid: bool = False) -> Optional[str]:
        if paid:
            return self.credentials.active_credential
        return self.credentials.active_credential or self.default_credential

    async def ensure_credential(self) -> str:
        """
        Return the active credential, running the selection flow if none is set.

        Raises:
            ClassifiedError: CREDENTIAL_MISSING if selection ends without one
        """
        if not await self.credentials.has_active_credential():
            await self.credentials.prompt_credential_selection()
        credential = self.credentials.active_credential
        if not credential:
            raise ClassifiedError(ErrorKind.CREDENTIAL_MISSING, "No credential selected")
        return credential
