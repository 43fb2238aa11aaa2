from shared.utils.app_status_code import AppStatusCode


class AppException(Exception):
    """Recoverable failure reported to the caller as a JsonOutResult envelope."""

    status_code: str = AppStatusCode.OPERATION_FAILED
    http_status: int = 400

    def __init__(self, message: str, status_code: str = None, http_status: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if http_status is not None:
            self.http_status = http_status
