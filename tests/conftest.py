"""
Pytest configuration for purchase workflow tests.

This file adds the project root to the Python path so that tests can import
from the domain, repositories, services and config packages, and provides
the fixtures shared by the service tests.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(Path(__file__).parent))

from builders import ADMIN, FixedClock, SequentialIds  # noqa: E402
from config.settings import Settings  # noqa: E402
from repositories.purchase_repository import InMemoryPurchaseRepository  # noqa: E402
from services.notification_service import InMemoryNotifier  # noqa: E402
from services.purchase_service import PurchaseService  # noqa: E402


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def repository() -> InMemoryPurchaseRepository:
    return InMemoryPurchaseRepository()


@pytest.fixture
def notifier() -> InMemoryNotifier:
    return InMemoryNotifier()


@pytest.fixture
def settings() -> Settings:
    return Settings(current_user=ADMIN, default_currency="JPY", items_per_page=20)


@pytest.fixture
def service(repository, notifier, settings, clock) -> PurchaseService:
    return PurchaseService(
        repository,
        notifier=notifier,
        settings=settings,
        clock=clock,
        id_factory=SequentialIds(),
    )
