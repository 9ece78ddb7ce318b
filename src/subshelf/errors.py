"""Exceptions raised by the subshelf core"""


class SubshelfError(Exception):
    """Base exception for subshelf errors"""


class ValidationError(SubshelfError):
    """User supplied input that cannot be compiled (e.g. a broken regex)"""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f'{field}: {message}')
        self.field = field
        self.message = message


class RelationParseError(SubshelfError):
    """Malformed line in an anime-relations rule file"""

    def __init__(self, line_number: int, line: str, reason: str = 'invalid relation rule found') -> None:
        super().__init__(f'line {line_number}: {reason}: {line!r}')
        self.line_number = line_number
        self.line = line
        self.reason = reason
