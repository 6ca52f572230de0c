from enum import Enum

class TaskColor(Enum):
    RED = "[red]"
    GREEN = "[green]"
    RESET = "[/]"

    def __str__(self):
        return self.value
