"""Exception hierarchy for pyqt-listsync."""


class ListSyncError(Exception):
    """Base class for all pyqt-listsync errors."""


class ConfigurationError(ListSyncError):
    """Raised when a snapshot, request or component is configured incorrectly.

    Configuration errors are surfaced to the caller and never leave
    rendered state half-updated.
    """


class DuplicateIdentifierError(ConfigurationError):
    """Raised when an item identifier appears more than once in a snapshot."""

    def __init__(self, identifier):
        super().__init__(f"Item identifier {identifier!r} appears more than once in snapshot")
        self.identifier = identifier


class DuplicateSectionError(ConfigurationError):
    """Raised when a section identifier appears more than once in a snapshot."""

    def __init__(self, section):
        super().__init__(f"Section {section!r} appears more than once in snapshot")
        self.section = section


class UnknownSectionError(ConfigurationError):
    """Raised when an operation names a section the snapshot does not contain."""

    def __init__(self, section):
        super().__init__(f"Section {section!r} is not part of the snapshot")
        self.section = section


class FetchRequestError(ConfigurationError):
    """Raised when a fetch request is malformed."""


class UnknownEntityError(FetchRequestError):
    """Raised when a request or record names an entity the store does not know."""

    def __init__(self, entity: str):
        super().__init__(f"Entity {entity!r} is not registered with the store")
        self.entity = entity


class StoreError(ListSyncError):
    """Raised when the backing store fails to read or commit."""


class StoreUnavailableError(StoreError):
    """Raised when the backing store has been closed or cannot be reached."""


class ThreadAffinityError(ListSyncError):
    """Raised when a UI-thread-only operation is called from another thread."""
