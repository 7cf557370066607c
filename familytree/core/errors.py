class FamilyTreeError(Exception):
    """Base for errors raised by the tree and member services.

    Each subclass carries the HTTP status it is reported with; the API
    layer renders any of them as ``{"detail": message}``.
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(FamilyTreeError):
    """Malformed id, missing required field or self-referential link."""

    status_code = 400


class InvalidState(FamilyTreeError):
    """The request is well formed but the graph cannot satisfy it."""

    status_code = 400


class Denied(FamilyTreeError):
    status_code = 403


class NotFound(FamilyTreeError):
    status_code = 404


class Internal(FamilyTreeError):
    status_code = 500
