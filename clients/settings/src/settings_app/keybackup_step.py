"""Recovery-key presentation step of the key backup setup wizard."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Tuple

from settings_app import strings
from settings_app.redact import redact_text

logger = logging.getLogger(__name__)

RECOVERY_KEY_BLOCK = 16
RECOVERY_KEY_GROUP = 4


class VersionHandle(Protocol):
    version: str


class CryptoService(Protocol):
    async def generate_recovery_key(self, session: Any) -> Tuple[str, Any]: ...

    async def create_backup_version(self, keys_backup: Any, creation_info: Any) -> VersionHandle: ...


class KeyBackupStepHost(Protocol):
    """What the step needs from the surrounding wizard screen."""

    def render_step(self, view: "KeyBackupStepView") -> None: ...

    def share_text(self, subject: str, text: str, chooser_title: str) -> None: ...

    def show_notice(self, message: str) -> None: ...

    def show_waiting_view(self) -> None: ...

    def hide_waiting_view(self) -> None: ...

    def show_error_dialog(self, title: str, message: str, on_ack: Callable[[], None]) -> None: ...

    def navigate_back(self) -> None: ...

    def finish(self, version: str) -> None: ...


class KeyBackupPhase(str, Enum):
    GENERATING_KEY = "generating_key"
    KEY_READY = "key_ready"
    CREATING_BACKUP = "creating_backup"
    DONE = "done"
    ERROR = "error"


@dataclass
class KeyBackupSetupState:
    """State shared by the wizard steps; step 3 owns the fields below."""

    recovery_key: Optional[str] = None
    megolm_backup_creation_info: Any = None
    copy_has_been_made: bool = False
    is_creating_backup_version: bool = False
    prepare_recovery_error: Optional[Exception] = None
    creating_backup_error: Optional[Exception] = None
    keys_version: Optional[VersionHandle] = None

    @property
    def phase(self) -> KeyBackupPhase:
        if self.keys_version is not None:
            return KeyBackupPhase.DONE
        if self.prepare_recovery_error is not None or self.creating_backup_error is not None:
            return KeyBackupPhase.ERROR
        if self.is_creating_backup_version:
            return KeyBackupPhase.CREATING_BACKUP
        if self.recovery_key:
            return KeyBackupPhase.KEY_READY
        return KeyBackupPhase.GENERATING_KEY


@dataclass(frozen=True)
class KeyBackupStepView:
    spinner_visible: bool
    spinner_text: Optional[str]
    recovery_key_text: Optional[str]
    copy_visible: bool
    finish_visible: bool


def format_recovery_key(recovery_key: str) -> str:
    """Lay a recovery key out as lines of four space-separated groups.

    >>> format_recovery_key("abcd1234abcd1234abcd1234abcd1234")
    'abcd 1234 abcd 1234\\nabcd 1234 abcd 1234'
    """

    compact = recovery_key.replace(" ", "")
    blocks = [compact[i : i + RECOVERY_KEY_BLOCK] for i in range(0, len(compact), RECOVERY_KEY_BLOCK)]
    lines = []
    for block in blocks:
        groups = [block[i : i + RECOVERY_KEY_GROUP] for i in range(0, len(block), RECOVERY_KEY_GROUP)]
        lines.append(" ".join(groups))
    return "\n".join(lines)


def keys_backup_of(session: Any) -> Any:
    crypto = getattr(session, "crypto", None)
    return getattr(crypto, "keys_backup", None)


class KeyBackupSetupStep3:
    def __init__(
        self,
        state: KeyBackupSetupState,
        crypto: CryptoService,
        host: KeyBackupStepHost,
        session: Any,
    ) -> None:
        self.state = state
        self.crypto = crypto
        self.host = host
        self.session = session

    def render(self) -> KeyBackupStepView:
        key = self.state.recovery_key
        if not key:
            return KeyBackupStepView(
                spinner_visible=True,
                spinner_text=strings.GENERATING_RECOVERY_KEY,
                recovery_key_text=None,
                copy_visible=False,
                finish_visible=False,
            )
        return KeyBackupStepView(
            spinner_visible=False,
            spinner_text=None,
            recovery_key_text=format_recovery_key(key),
            copy_visible=True,
            finish_visible=True,
        )

    def _publish(self) -> None:
        self.host.render_step(self.render())

    async def enter(self) -> None:
        self._publish()
        if self.state.recovery_key is None:
            await self.prepare_recovery_key()

    async def prepare_recovery_key(self) -> None:
        try:
            recovery_key, creation_info = await self.crypto.generate_recovery_key(self.session)
        except Exception as exc:
            logger.warning("recovery key generation failed: %s", redact_text(str(exc)))
            self.state.prepare_recovery_error = exc
            self.host.show_error_dialog(strings.UNKNOWN_ERROR, _error_message(exc), self.acknowledge_error)
            return
        self.state.recovery_key = recovery_key
        self.state.megolm_backup_creation_info = creation_info
        self._publish()

    def on_copy(self) -> bool:
        recovery_key = self.state.recovery_key
        if not recovery_key:
            return False
        self.host.share_text(strings.RECOVERY_KEY, format_recovery_key(recovery_key), strings.SHARE_RECOVERY_KEY_TITLE)
        self.state.copy_has_been_made = True
        return True

    async def on_finish(self) -> bool:
        """Create the backup version once the user has kept a copy of the key."""

        if self.state.is_creating_backup_version or self.state.keys_version is not None:
            return False
        creation_info = self.state.megolm_backup_creation_info
        if creation_info is None or not self.state.copy_has_been_made:
            self.host.show_notice(strings.PLEASE_MAKE_COPY)
            return False
        keys_backup = keys_backup_of(self.session)
        if keys_backup is None:
            logger.warning("session has no key backup subsystem; cannot create backup version")
            return False

        self.state.is_creating_backup_version = True
        self.host.show_waiting_view()
        try:
            keys_version = await self.crypto.create_backup_version(keys_backup, creation_info)
        except Exception as exc:
            logger.warning("backup version creation failed: %s", redact_text(str(exc)))
            self.state.is_creating_backup_version = False
            self.state.creating_backup_error = exc
            self.host.hide_waiting_view()
            self.host.show_error_dialog(strings.UNEXPECTED_ERROR, _error_message(exc), self.acknowledge_error)
            return False
        except asyncio.CancelledError:
            self.state.is_creating_backup_version = False
            self.host.hide_waiting_view()
            raise

        self.state.is_creating_backup_version = False
        self.host.hide_waiting_view()
        self.state.keys_version = keys_version
        logger.info("key backup version %s created", keys_version.version)
        self.host.finish(keys_version.version)
        return True

    def acknowledge_error(self) -> None:
        self.state.prepare_recovery_error = None
        self.state.creating_backup_error = None
        self.host.navigate_back()


def _error_message(exc: Exception) -> str:
    return redact_text(str(exc)) or type(exc).__name__
