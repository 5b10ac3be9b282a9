"""WaterWise — Error taxonomy."""


class WaterWiseError(Exception):
    """Base class for all WaterWise errors."""


class DataAccessError(WaterWiseError):
    """Raised when the local store is unreachable or returns corrupt data."""


class NetworkError(WaterWiseError):
    """Raised when a public API cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(message)


class ImportFormatError(WaterWiseError):
    """Raised when an import document does not have the export layout."""
