class MoodBoardError(Exception):
    """Base exception for all mood board errors."""
    pass

class MoodValidationError(MoodBoardError):
    """Raised when a submission is missing a field or has a bad value."""
    pass

class DuplicateMoodError(MoodBoardError):
    """Raised when a submission repeats a recent (or identical local) entry."""
    pass

class SubmissionInProgressError(MoodBoardError):
    """Raised when a client submits again before its previous submit finished."""
    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__(f"A submission from {client_id} is already in progress.")

class NetworkError(MoodBoardError):
    """Raised when the storage backend cannot be reached."""
    pass

class RemoteStoreError(MoodBoardError):
    """Raised when the storage backend rejects an operation (schema, permission...)."""
    pass

class RemoteTimeoutError(RemoteStoreError):
    """Raised when the storage backend does not answer in time."""
    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(f"Storage did not answer within {seconds:g}s.")

class LoadError(MoodBoardError):
    """Raised when the board cannot be (re)loaded from storage."""
    pass

class DeleteError(MoodBoardError):
    """Raised when clearing the board at the storage backend fails."""
    pass

class ConfigurationError(MoodBoardError):
    """Raised when the backend connection settings are missing."""
    pass
