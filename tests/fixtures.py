"""
Test Fixtures

Common test classes used across test modules
"""

import uuid
from typing import Any, List, Optional


class Database:
    """Test database class"""

    def __init__(self):
        self.name = "TestDB"
        self.users = {"alice": "secret"}


class UserRepository:
    """Test repository with dependencies"""

    def __init__(self, db: Database):
        self.db = db

    def password_of(self, login: str) -> Optional[str]:
        return self.db.users.get(login)


class Logger:
    """Collects log lines, tagged with the current request id"""

    def __init__(self, request_id: Any = None):
        self.request_id = request_id
        self.lines: List[str] = []

    def info(self, message: str) -> None:
        prefix = f"[{self.request_id.value}] " if self.request_id is not None else ""
        self.lines.append(prefix + message)


class RequestId:
    """Per-request identifier"""

    def __init__(self, value: Optional[str] = None):
        self.value = value or uuid.uuid4().hex

    def get(self) -> str:
        return self.value

    def set(self, value: str) -> None:
        self.value = value


class Node:
    """Linked node used for cyclic object graphs"""

    def __init__(self, value: Any, parent: Any = None, child: Any = None):
        self.value = value
        self.parent = parent
        self.child = child


class CounterService:
    """Service with mutable state for testing memoization"""

    def __init__(self):
        self.counter = 0

    def increment(self):
        self.counter += 1
        return self.counter
