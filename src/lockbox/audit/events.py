"""Audit event type definitions."""

from enum import Enum


class EventType(str, Enum):
    """Audit event types."""

    # Vault events
    VAULT_LOAD = "vault.load"
    VAULT_SAVE = "vault.save"
    VAULT_INIT = "vault.init"

    # Credential events
    CRED_CREATE = "credential.create"
    CRED_UPDATE = "credential.update"
    CRED_READ = "credential.read"
    CRED_DELETE = "credential.delete"
    CRED_LIST = "credential.list"

    # Password generation
    PASSWORD_GENERATE = "password.generate"
