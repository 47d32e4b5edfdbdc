"""Parser error types."""

from icbincss.errors import IcbincssError


class ParseError(IcbincssError):
    """Raised when ICBINCSS source cannot be parsed."""

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ):
        self.line = line
        self.column = column
        super().__init__(message)
