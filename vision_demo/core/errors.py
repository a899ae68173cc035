class PlatformError(Exception):
    def __init__(self, code: str, message: str, status_code: int = 400, details: dict | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class InvalidInputError(PlatformError):
    def __init__(self, code: str, message: str, details: dict | None = None):
        super().__init__(code, message, status_code=400, details=details)


class ProcessingError(PlatformError):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__('PROCESSING_FAILED', message, status_code=500, details=details)
