"""
Error taxonomy for Mona.

NotFound       unknown user, client or nested entity
Conflict       duplicate username
InvalidCredentials  password mismatch
PermissionDenied    write to a shared client owned by someone else
StoreError     I/O failure reading or writing persisted state
"""


class MonaError(Exception):
    """Root of all Mona domain errors."""

    message = "Server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class NotFound(MonaError):
    message = "Not found"


class UserNotFound(NotFound):
    message = "User not found"

    def __init__(self, username: str):
        super().__init__()
        self.username = username


class ClientNotFound(NotFound):
    message = "Client not found"

    def __init__(self, client_id: str):
        super().__init__(f"Client not found: {client_id}")
        self.client_id = client_id


class EntityNotFound(NotFound):
    """A link of a composite path (meeting, deliverable, task) does not exist."""

    def __init__(self, kind: str, path: str):
        super().__init__(f"{kind.capitalize()} not found: {path}")
        self.kind = kind
        self.path = path


class Conflict(MonaError):
    message = "Conflict"


class UserExists(Conflict):
    message = "User already exists"

    def __init__(self, username: str):
        super().__init__()
        self.username = username


class InvalidCredentials(MonaError):
    message = "Incorrect password"


class PermissionDenied(MonaError):
    message = "Permission denied"


class StoreError(MonaError):
    """Persistence failure (disk, database or network)."""

    message = "Server error"
