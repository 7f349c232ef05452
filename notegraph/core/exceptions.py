# notegraph/core/exceptions.py
class DataUnavailableException(Exception):
    """Raised when the note store cannot deliver a user's notes."""
    def __init__(self, message="Notes are unavailable."):
        self.message = message
        super().__init__(self.message)

class InvalidInputException(Exception):
    """Raised when query parameters cannot be interpreted."""
    def __init__(self, message="Invalid input."):
        self.message = message
        super().__init__(self.message)

class InternalConsistencyException(Exception):
    """Raised when an edge references a node that is not part of the graph."""
    def __init__(self, message="Graph is internally inconsistent."):
        self.message = message
        super().__init__(self.message)

class GraphSessionNotFoundException(Exception):
    """Raised when a query arrives before any graph was built for the user."""
    def __init__(self, message="No graph has been loaded for this workspace."):
        self.message = message
        super().__init__(self.message)

class NoteNotFoundException(Exception):
    """Raised when no note carries the requested title."""
    def __init__(self, message="Note not found."):
        self.message = message
        super().__init__(self.message)
