"""Exception hierarchy for ProManage.

Core operations report expected failures as return values; these exceptions
cover the cases a caller has to branch on.
"""

from __future__ import annotations


class ProManageError(Exception):
    """Base class for all ProManage errors."""


class MissingCredentials(ProManageError):
    """Neither a token nor a username/password pair (or a required base URL) was given."""


class TransportFailure(ProManageError):
    """A provider request failed below HTTP (timeout, DNS, connection reset)."""


class NotFound(ProManageError):
    """A project or repository could not be resolved."""


class NoStorageLocation(ProManageError):
    """A project has no storage location to scan."""


class ParseFailure(ProManageError):
    """A description file could not be read as text."""


class EncryptionError(ProManageError):
    """Encrypting or decrypting a stored credential failed."""
