class JournalError(Exception):
    """Base class for every error raised by the journal assistant."""


class LLMError(JournalError):
    """The text-completion call did not produce a usable response."""


class NetworkError(LLMError):
    """Connection failure or timeout talking to the model provider."""


class UpstreamError(LLMError):
    """The provider answered with an error status or an unreadable body."""


class CategorizationFailed(JournalError):
    """Extraction failed as a whole; no segments were produced."""


class CommandFailed(JournalError):
    """A chat instruction could not be sent to the model."""


class SummaryFailed(JournalError):
    """A group summary could not be generated."""


class DisambiguationPending(JournalError):
    """The previous save still has a person choice waiting."""


class StoreError(JournalError):
    """A record store rejected an operation."""


class RecordNotFound(StoreError):
    def __init__(self, store: str, record_id: str):
        super().__init__(f"{store} has no record {record_id}")
        self.store = store
        self.record_id = record_id
