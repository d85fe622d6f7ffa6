from typing import Optional


class SeederError(Exception):
    """
    Base class for every failure raised by the seeder pipeline.
    """


class InvalidConfiguration(SeederError):
    """
    The run input cannot be turned into a usable configuration (e.g. a bbox
    coordinate outside the valid latitude/longitude range).
    """


class TransportFailure(SeederError):
    """
    A single delivery attempt to an Overpass endpoint failed. Retryable.
    """

    def __init__(
        self,
        message: str,
        *,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class EndpointExhausted(SeederError):
    """
    Every endpoint ran out of attempts.
    """

    def __init__(
        self, message: str, *, last_error: Optional[Exception] = None
    ) -> None:
        super().__init__(message)
        self.last_error = last_error


class MalformedResponse(SeederError):
    """
    The Overpass payload does not have the expected `elements` list.
    """
