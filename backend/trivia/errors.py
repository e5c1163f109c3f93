class TriviaError(Exception):
    """Base class for errors raised by the trivia server."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class QuestionBankError(TriviaError):
    """The question bank is missing, unreadable or empty. Fatal at startup."""


class ProtocolError(TriviaError):
    """An inbound frame was malformed, oversized or of an unknown type."""


class NicknameRejected(TriviaError):
    """A nickname claim broke a registration rule."""
