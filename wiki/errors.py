"""
Errors raised by the wiki.

Every error carries the HTTP status the transport maps it to.
"""


class WikiError(Exception):
    status_code = 500
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(WikiError):
    """
    The page does not exist in storage.
    """

    status_code = 404
    code = "not_found"

    def __init__(self, identifier: str):
        super().__init__(f"Page {identifier!r} not found")
        self.identifier = identifier


class InvalidPathError(WikiError):
    """
    The request path is not a known action followed by a valid identifier.
    """

    status_code = 404
    code = "invalid_path"

    def __init__(self, path: str):
        super().__init__(f"Invalid page path {path!r}")
        self.path = path


class BadRequestError(WikiError):
    status_code = 400
    code = "bad_request"


class StorageError(WikiError):
    """
    Reading or writing the storage failed for a reason other than absence.
    """

    status_code = 500
    code = "storage_error"


class RenderError(StorageError):
    code = "render_error"
