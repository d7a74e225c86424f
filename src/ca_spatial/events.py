from __future__ import annotations

import queue
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class EditAction(str, Enum):
    """Kinds of message posted by the interactive thread."""

    DRAW = "draw"
    PIN = "pin"
    UNPIN = "unpin"
    REBUILD = "rebuild"


@dataclass(frozen=True)
class CellEdit:
    action: EditAction
    cell: Optional[int] = None


class EditQueue:
    """Thread-safe mailbox from the interactive thread to one statistic.

    The interactive thread only ever posts; the analysis thread drains the
    queue at the start of each ``analyze`` call.
    """

    def __init__(self) -> None:
        self._queue: "queue.SimpleQueue[CellEdit]" = queue.SimpleQueue()

    def post(self, action: EditAction, cell: Optional[int] = None) -> None:
        self._queue.put(CellEdit(EditAction(action), cell))

    def drawn(self, cell: int) -> None:
        self.post(EditAction.DRAW, cell)

    def pin(self, cell: int) -> None:
        self.post(EditAction.PIN, cell)

    def unpin(self, cell: int) -> None:
        self.post(EditAction.UNPIN, cell)

    def request_rebuild(self) -> None:
        self.post(EditAction.REBUILD)

    def drain(self) -> List[CellEdit]:
        edits = []
        while True:
            try:
                edits.append(self._queue.get_nowait())
            except queue.Empty:
                return edits

    def empty(self) -> bool:
        return self._queue.empty()
