from typing import Protocol
from todos.domain.task import TaskId

class IdProvider(Protocol):
    """Port responsible for minting the next logical task identifier."""
    async def new_id(self) -> TaskId:
        pass
