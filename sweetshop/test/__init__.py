from sweetshop.test.unit import (
    FakeRepository,
    FakeSweetRepository,
    FakeUnitOfWork,
    FakeUserRepository,
)

__all__ = [
    "FakeRepository",
    "FakeSweetRepository",
    "FakeUnitOfWork",
    "FakeUserRepository",
]
