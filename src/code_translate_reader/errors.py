class ReaderError(Exception):
    pass


class TranslationError(ReaderError):
    """A translation request failed inside one provider adapter."""

    def __init__(self, provider: str, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.cause = cause


class NetworkError(TranslationError):
    def __init__(
        self,
        provider: str,
        message: str,
        status: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(provider, message, cause)
        self.status = status


class MissingCredentialsError(TranslationError):
    pass


class UnexpectedResponseShapeError(TranslationError):
    pass


class ServiceError(TranslationError):
    """The provider answered, but reported an error code in the body."""

    def __init__(self, provider: str, message: str, code: str) -> None:
        super().__init__(provider, message)
        self.code = code


class SpeechUnavailableError(ReaderError):
    pass
