class ConfigError(ValueError):
    pass


class SessionCacheError(RuntimeError):
    pass


class LedgerError(RuntimeError):
    pass


class AuthenticationError(RuntimeError):
    pass


class WebhookError(RuntimeError):
    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.status = status
