import math
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, TypeVar

from tracker.domain import TRANSACTION_TYPES, NewTransaction
from tracker.transforms import number_or

T = TypeVar('T')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default: T) -> T:
        return self._value

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def get_or_else(self, default: T) -> T:
        return default

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def is_right(self) -> bool:
        return True

    def get_or_else(self, default: T) -> T:
        return self._value

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def is_right(self) -> bool:
        return False

    def get_or_else(self, default: T) -> T:
        return default

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def lookup_name(lookup: Dict[str, str], category_id: Any) -> Maybe[str]:
    name = lookup.get(str(category_id))
    return Some(name) if name is not None else Nothing()


def validate_new_transaction(
    category_id: Any, type: str, amount: Any, description: Any = None
) -> Either[str, NewTransaction]:
    """Check the raw form values before anything is sent to the server.

    Returns Left(user-facing message) or Right(NewTransaction). A blank
    description is dropped from the result.
    """
    cid = number_or(category_id, math.nan)
    if not math.isfinite(cid) or cid <= 0:
        return Left("Select a valid category")

    value = number_or(amount, math.nan)
    if not math.isfinite(value) or value <= 0:
        return Left("Enter a valid amount (> 0)")

    if type not in TRANSACTION_TYPES:
        return Left("Select a valid type")

    note = str(description).strip() if description is not None else ""
    return Right(NewTransaction(
        category_id=int(cid) if cid.is_integer() else cid,
        type=type,
        amount=value,
        description=note or None,
    ))
