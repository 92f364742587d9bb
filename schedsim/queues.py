from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .errors import InternalInvariantViolation

NO_QUANTUM = -1
NO_ALLOTMENT = -1


class ReadyQueueSet:
    """
    N FIFO queues of pids, index 0 being the highest priority.

    Each queue may carry a quantum (``NO_QUANTUM`` when the policy does not
    use one); ``allotment`` is the priority-boost interval, ``NO_ALLOTMENT``
    when boosting is disabled. A pid lives in at most one queue at a time.
    """

    def __init__(
        self,
        count: int,
        quantums: Optional[Sequence[int]] = None,
        allotment: int = NO_ALLOTMENT,
    ) -> None:
        if count < 1:
            raise InternalInvariantViolation(f"ReadyQueueSet needs at least one queue, got {count}")
        if quantums is not None and len(quantums) != count:
            raise InternalInvariantViolation(
                f"{len(quantums)} quantums given for {count} ready queues"
            )

        self._queues: List[List[int]] = [[] for _ in range(count)]
        self._quantums: Tuple[int, ...] = tuple(quantums) if quantums is not None else (NO_QUANTUM,) * count
        self.allotment = allotment

    def __len__(self) -> int:
        return len(self._queues)

    def __contains__(self, pid: int) -> bool:
        return self.index_of(pid) is not None

    def _check_index(self, queue_index: int) -> None:
        if not 0 <= queue_index < len(self._queues):
            raise InternalInvariantViolation(
                f"Ready queue {queue_index} out of range (0..{len(self._queues) - 1})"
            )

    def quantum(self, queue_index: int) -> int:
        self._check_index(queue_index)
        return self._quantums[queue_index]

    def queue(self, queue_index: int) -> Tuple[int, ...]:
        self._check_index(queue_index)
        return tuple(self._queues[queue_index])

    def head(self, queue_index: int) -> Optional[int]:
        self._check_index(queue_index)
        queue = self._queues[queue_index]
        return queue[0] if queue else None

    def index_of(self, pid: int) -> Optional[int]:
        for idx, queue in enumerate(self._queues):
            if pid in queue:
                return idx
        return None

    def enqueue(self, queue_index: int, pid: int) -> None:
        self._check_index(queue_index)
        if pid in self:
            raise InternalInvariantViolation(f"Process {pid} is already in a ready queue")
        self._queues[queue_index].append(pid)

    def dequeue_by_pid(self, pid: int) -> None:
        # Absent pid is fine: the process may already have left the ready set.
        for queue in self._queues:
            if pid in queue:
                queue.remove(pid)
                return

    def boost(self) -> List[int]:
        """
        Move every pid from the lower queues to the tail of queue 0, keeping
        queue order and FIFO order within each queue. Returns the moved pids.
        """
        moved: List[int] = []
        for queue in self._queues[1:]:
            moved.extend(queue)
            queue.clear()
        self._queues[0].extend(moved)
        return moved

    def snapshot(self) -> List[List[int]]:
        return [list(queue) for queue in self._queues]

    def __repr__(self) -> str:
        return f"ReadyQueueSet(queues={self.snapshot()}, quantums={list(self._quantums)}, allotment={self.allotment})"
