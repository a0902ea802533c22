from .errors import (  # noqa
    ErrorKind,
    ConflictError,
    ForbiddenError,
    InsufficientStockError,
    NotFoundError,
    SweetShopError,
    TransientError,
    UnauthenticatedError,
    ValidationFailedError,
)
from .models import (  # noqa
    AbstractRepository,
    AbstractUnitOfWork,
    Entity,
    ReposMap,
)
from .result import Failure, Ok, Result, returns_result  # noqa
