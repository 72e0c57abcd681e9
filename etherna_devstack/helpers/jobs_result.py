from enum import Enum
from enum import auto


class JobResult(Enum):
    GOOD = auto()
    BAD = auto()


class OperationError:
    def __init__(self, log: str, exit_code: int | None = None):
        self.log = log
        self.exit_code = exit_code

    def __eq__(self, other):
        return other == JobResult.BAD

    def __contains__(self, text: str) -> bool:
        return text in self.log

    def __repr__(self):
        return f'Operation finished unsuccessful (exit code {self.exit_code}):\n{self.log}'
