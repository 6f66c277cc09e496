"""Error types shared by the call orchestration layers."""


class ReceptionistError(Exception):
    """Base exception for call orchestration errors."""
    pass


class ConfigurationError(ReceptionistError):
    """A tenant or its agent identity is not provisioned.

    Fatal for the webhook: an unconfigured tenant cannot originate a call.
    """
    pass


class NotFoundError(ReceptionistError):
    """A lookup needed mid-call found nothing (e.g. no department number).

    Carries the sentence the agent should say instead of the tool result.
    """

    def __init__(self, message: str, spoken_message: str | None = None):
        super().__init__(message)
        self.spoken_message = spoken_message or "I'm sorry, that isn't available right now."


class CollaboratorError(ReceptionistError):
    """An external collaborator (directory, store, call control) failed."""

    def __init__(self, collaborator: str, message: str):
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator
