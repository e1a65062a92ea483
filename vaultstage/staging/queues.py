"""
Staging queues.

Nine ordered queues, one per (resource kind, operation kind), hold the
operations waiting for deployment. Insertion order is display order and
deploy order.
"""

from enum import Enum
from typing import Dict, Generic, Iterator, List, Sequence, Tuple, TypeVar

from pydantic import BaseModel

from ..errors import ValidationError


class ResourceKind(str, Enum):
    SAFE = "safe"
    MEMBER = "member"
    ACCOUNT = "account"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class OperationKind(str, Enum):
    CREATE = "create"
    MODIFY = "modify"
    REMOVE = "remove"


# Creates first, then removals, then modifications.
DEPLOY_ORDER: List[Tuple[ResourceKind, OperationKind]] = [
    (ResourceKind.SAFE, OperationKind.CREATE),
    (ResourceKind.MEMBER, OperationKind.CREATE),
    (ResourceKind.ACCOUNT, OperationKind.CREATE),
    (ResourceKind.SAFE, OperationKind.REMOVE),
    (ResourceKind.MEMBER, OperationKind.REMOVE),
    (ResourceKind.ACCOUNT, OperationKind.REMOVE),
    (ResourceKind.SAFE, OperationKind.MODIFY),
    (ResourceKind.MEMBER, OperationKind.MODIFY),
    (ResourceKind.ACCOUNT, OperationKind.MODIFY),
]

T = TypeVar("T", bound=BaseModel)


class StagingQueue(Generic[T]):
    """
    An ordered list of pending operations of one kind.

    Example:
        ```python
        queue = StagingQueue(ResourceKind.SAFE, OperationKind.MODIFY)
        queue.upsert(edited_safe)   # replaces in place if the id is staged
        queue.remove_at(0)
        ```
    """

    def __init__(self, kind: ResourceKind, operation: OperationKind) -> None:
        self.kind = kind
        self.operation = operation
        self._items: List[T] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __repr__(self) -> str:
        return f"StagingQueue({self.kind.value}, {self.operation.value}, {len(self)} items)"

    @property
    def items(self) -> List[T]:
        return list(self._items)

    def append(self, item: T) -> None:
        self._items.append(item)

    def extend(self, items: Sequence[T]) -> None:
        self._items.extend(items)

    def ids(self) -> List[str]:
        return [item.id for item in self._items]

    def contains(self, item_id: str) -> bool:
        return any(item.id == item_id for item in self._items)

    def upsert(self, item: T) -> bool:
        """
        Replace the entry with the same id in place, or append.

        Returns:
            True if an existing entry was replaced
        """
        for index, existing in enumerate(self._items):
            if existing.id == item.id:
                self._items[index] = item
                return True
        self._items.append(item)
        return False

    def remove_at(self, index: int) -> T:
        """Remove and return the entry at a position."""
        if index < 0 or index >= len(self._items):
            raise ValidationError(
                f"No staged {self.kind.value} {self.operation.value} at position {index}"
            )
        return self._items.pop(index)

    def clear(self) -> None:
        self._items.clear()


class StagingArea:
    """
    The nine staging queues, owned together.

    Example:
        ```python
        staging = StagingArea()
        staging.queue(ResourceKind.SAFE, OperationKind.CREATE).append(safe)
        staging.total  # 1
        ```
    """

    def __init__(self) -> None:
        self._queues: Dict[Tuple[ResourceKind, OperationKind], StagingQueue] = {
            key: StagingQueue(*key) for key in DEPLOY_ORDER
        }

    def queue(self, kind: ResourceKind, operation: OperationKind) -> StagingQueue:
        return self._queues[(ResourceKind(kind), OperationKind(operation))]

    def in_deploy_order(self) -> List[StagingQueue]:
        return [self._queues[key] for key in DEPLOY_ORDER]

    @property
    def total(self) -> int:
        return sum(len(queue) for queue in self._queues.values())

    def counts(self) -> Dict[str, int]:
        """Queue lengths keyed ``"{kind}-{operation}"``."""
        return {
            f"{kind.value}-{operation.value}": len(self._queues[(kind, operation)])
            for kind, operation in DEPLOY_ORDER
        }

    def clear(self) -> None:
        for queue in self._queues.values():
            queue.clear()
