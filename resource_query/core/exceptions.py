class DomainError(Exception):
    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class QueryError(DomainError):
    """Client-input error detected before any query is issued."""

    default_code = "QRY_000"

    def __init__(self, message: str, code: str | None = None, details: dict | None = None):
        super().__init__(code or self.default_code, message, details)


class GrammarError(QueryError):
    """Malformed filter shape, bad field name, unknown operator or too many operations."""

    default_code = "QRY_GRAMMAR"


class AccessError(QueryError):
    """Field is not allow-listed for this call or does not exist on the table."""

    default_code = "QRY_ACCESS"


class FilterValueError(QueryError):
    """Wrong arity, non-numeric range bounds or an unparseable relative date."""

    default_code = "QRY_VALUE"


class ProjectionError(QueryError):
    default_code = "QRY_PROJECTION"


class SortError(QueryError):
    default_code = "QRY_SORT"
