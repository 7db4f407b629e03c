"""Shared domain models for dualrotate."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class WorkloadRef:
    """Pod (kubectl) or container (docker) the client binary runs in."""

    name: str
    namespace: Optional[str] = None

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name


@dataclass(frozen=True)
class TargetSession:
    """Where and as whom administrative statements run."""

    workload: WorkloadRef
    user: str
    password: str = field(repr=False)
    host: str
    container: str = "mysql"


@dataclass(frozen=True)
class UserRecord:
    """A database account to rotate across one or more host patterns."""

    username: str
    password: str = field(default="", repr=False)
    hosts: Tuple[str, ...] = ()


class TransactionState(str, Enum):
    IDLE = "idle"
    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    FAILED = "failed"
