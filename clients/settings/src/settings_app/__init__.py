"""Discovery settings and key backup setup flows for the messaging client."""

from .discovery_controller import DiscoveryController, InteractionListener, build_rows
from .discovery_coordinator import DiscoveryCoordinator
from .discovery_reducer import outbound_intent, reduce
from .discovery_state import DiscoverySettingsState
from .keybackup_step import KeyBackupSetupState, KeyBackupSetupStep3, format_recovery_key
from .pid_state import IdentifierKind, PidState, SharedState

__all__ = [
    "DiscoveryController",
    "DiscoveryCoordinator",
    "DiscoverySettingsState",
    "IdentifierKind",
    "InteractionListener",
    "KeyBackupSetupState",
    "KeyBackupSetupStep3",
    "PidState",
    "SharedState",
    "build_rows",
    "format_recovery_key",
    "outbound_intent",
    "reduce",
]
