"""User-visible text for the settings flows."""

from __future__ import annotations

NONE = "None"
IDENTITY_SERVER = "Identity server"
IDENTITY_SERVER_INFO = (
    "You are currently using {server} to discover and be discoverable by existing contacts you know."
)
DISCONNECT_IDENTITY_SERVER_INFO = (
    "Disconnecting from your identity server will mean you won't be discoverable by other users "
    "and you won't be able to invite others by email or phone."
)
ACTION_CHANGE = "Change"
ACTION_DISCONNECT = "Disconnect"

EMAILS_TITLE = "Discoverable email addresses"
NO_EMAILS = "Discovery options will appear once you have added an email."
EMAILS_LOAD_FAILED = "Unable to load your email addresses: {error}"

PHONES_TITLE = "Discoverable phone numbers"
NO_PHONES = "Discovery options will appear once you have added a phone number."
PHONES_LOAD_FAILED = "Unable to load your phone numbers: {error}"

PENDING = "Pending"
CONFIRM_PENDING = "Check your inbox and follow the confirmation link, then come back here."

RECOVERY_KEY = "Recovery Key"
SHARE_RECOVERY_KEY_TITLE = "Share recovery key with…"
PLEASE_MAKE_COPY = "Please make a copy"
GENERATING_RECOVERY_KEY = "Generating recovery key using passphrase, this process can take several seconds."
UNKNOWN_ERROR = "Sorry, an error occurred"
UNEXPECTED_ERROR = "Unexpected error"
