"""Exception types raised by workspace-cli core modules."""


class WorkspaceCLIError(Exception):
    """Base class for all workspace-cli errors."""


class InvalidInputError(WorkspaceCLIError, ValueError):
    """User-supplied input could not be interpreted."""


class InvalidCellReferenceError(InvalidInputError):
    """A cell token is not a letter run followed by a digit run."""

    def __init__(self, token: str, reason: str = "") -> None:
        self.token = token
        message = f"invalid cell reference: {token!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidRangeError(InvalidInputError):
    """A range token is not two cell references joined by a colon."""

    def __init__(self, token: str, reason: str = "expected format A1:B2") -> None:
        self.token = token
        super().__init__(f"invalid range format: {token!r} ({reason})")


class InvalidColumnError(InvalidInputError):
    """A column token is not a bare letter sequence."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"invalid column: {token!r} (expected letters such as A, Z or AA)")


class NotFoundError(WorkspaceCLIError, LookupError):
    """A named resource does not exist."""


class SheetNotFoundError(NotFoundError):
    """No sheet with the given title exists in the spreadsheet."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"sheet not found: {name}")


class LabelNotFoundError(NotFoundError):
    """No Gmail label with the given name exists."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"label not found: {name}")
