"""
Pytest will auto-discover / import this file called 'conftest.py'. ]
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.models import GameModel, PlayerModel
from src.db.memory_store import InMemoryDocumentStore
from src.db.schema import Base

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


# --- MANUAL CLOCK ---
class FakeHandle:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Scheduler whose clock only moves when the test says so. Callbacks run inside advance()."""

    def __init__(self) -> None:
        self.time = 0.0
        self.handles: list[FakeHandle] = []

    def now(self) -> float:
        return self.time

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(self.time + delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        self.time += seconds
        for handle in list(self.handles):
            if not handle.cancelled and handle.due <= self.time:
                self.handles.remove(handle)
                handle.callback()

    def skip_time(self, seconds: float) -> None:
        """Move the clock WITHOUT running due callbacks (suspended tab / starved event loop)."""
        self.time += seconds

    @property
    def live_timers(self) -> int:
        return sum(1 for handle in self.handles if not handle.cancelled)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


# --- SAMPLE DATA ---
def make_player(name: str, joined_at: int, **fields) -> PlayerModel:
    defaults = {
        "life": 40,
        "color": None,
        "effects": {"poison": 0, "monarch": False, "initiative": False},
        "commander_damage": {},
    }
    defaults.update(fields)
    return PlayerModel(name=name, joined_at=joined_at, **defaults)


@pytest.fixture
def three_player_game() -> GameModel:
    return GameModel(
        game_id="table-1",
        name="Friday night",
        players={
            "a": make_player("Alice", 1, color="purple"),
            "b": make_player("Bob", 2, color="blue"),
            "c": make_player("Cleo", 3, color="green"),
        },
    )
