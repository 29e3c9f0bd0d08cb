class ArchivoError(Exception):
    """
    Base for errors the API turns into plain-text responses.
    Each subclass carries the HTTP status it maps to.
    """

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotAuthenticated(ArchivoError):
    status_code = 401
    default_message = "Not authenticated"


class ValidationError(ArchivoError):
    status_code = 400
    default_message = "Invalid request"


class InvalidRelationType(ValidationError):
    default_message = "Invalid relation type"

    def __init__(self, relation_type=None):
        self.relation_type = relation_type
        if relation_type is None:
            super().__init__()
        else:
            super().__init__(f"Invalid relation type: {relation_type!r}")


class Forbidden(ArchivoError):
    status_code = 403
    default_message = "Not authorized"


class NotFound(ArchivoError):
    status_code = 404
    default_message = "Not found"


class StorageError(ArchivoError):
    status_code = 500
    default_message = "Storage error"
