from __future__ import annotations

from typing import ContextManager, Protocol


class UnitOfWork(Protocol):
    """Runs a block of repository calls as one atomic transaction.

    Nested ``transaction()`` blocks join the outermost one; any exception
    escaping the outermost block rolls everything back.
    """

    def transaction(self) -> ContextManager[None]:
        raise NotImplementedError
