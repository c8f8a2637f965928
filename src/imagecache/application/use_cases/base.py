"""Request/response plumbing shared by the cache use cases."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BaseRequest(ABC):
    """Immutable input of a use case, validated inside ``execute``."""


@dataclass(frozen=True)
class BaseResponse(ABC):
    """Immutable result of a use case."""


class BaseUseCase[TRequest: BaseRequest, TResponse: BaseResponse](ABC):
    """One cache operation, run through ``execute``.

    Implementations receive their ports at construction and raise
    ``ImageCacheError`` subclasses on failure.
    """

    @abstractmethod
    def execute(self, request: TRequest) -> TResponse:
        raise NotImplementedError
