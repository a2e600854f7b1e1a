"""Custom exceptions for the compatibility checker."""


class CompatCheckError(Exception):
    """Base exception for compatcheck errors."""
    pass


class MalformedSnapshotError(CompatCheckError):
    """Raised when a snapshot document is structurally invalid."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DuplicateMemberError(CompatCheckError):
    """Raised when two members of one entity share an identity."""
    def __init__(self, entity: str, identity: str):
        super().__init__(f"Duplicate member '{identity}' in entity '{entity}'")
        self.entity = entity
        self.identity = identity


class AmbiguousMatchError(CompatCheckError):
    """Raised when overloads of one member cannot be paired across snapshots."""
    def __init__(self, entity: str, member: str, removed: list = None, added: list = None):
        super().__init__(
            f"Cannot pair overloads of '{entity}.{member}': "
            f"{len(removed or [])} removed, {len(added or [])} added"
        )
        self.entity = entity
        self.member = member
        self.removed = removed or []
        self.added = added or []


class ConfigError(CompatCheckError):
    """Raised when checker configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
