"""Pytest configuration and fixtures for Lumina backend tests.

This module provides reusable fixtures for testing:
- DynamoDB and SSM mocking with moto
- Fully wired services with a controllable clock
- Seeded default data (guests, venues, tiers, config)
- Admin credentials for the back-office routes
"""

import datetime as dt
import os
from dataclasses import dataclass
from typing import Any, Generator

import boto3
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-lumina")
os.environ.setdefault("LUMINA_SSM_PREFIX", "/lumina/test")
os.environ.setdefault("LUMINA_SEED_ON_STARTUP", "false")

if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

TABLE_PREFIX = os.environ["DYNAMODB_TABLE_PREFIX"]

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse-battery"


class FakeClock:
    """Callable clock that tests move forward by hand."""

    def __init__(self, now: dt.datetime) -> None:
        self.now = now

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs: float) -> dt.datetime:
        self.now += dt.timedelta(**kwargs)
        return self.now


@dataclass
class Services:
    """Every service wired against the same mocked tables."""

    db: Any
    feed: Any
    directory: Any
    verification: Any
    voting: Any
    stock: Any
    rsvps: Any
    scans: Any
    admission: Any
    admin: Any


# === Singleton reset ===


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset cached services before and after each test.

    Tests using mock_aws need fresh boto3 clients created inside the
    mock context rather than ones cached by a previous test.
    """
    from lumina.api.dependencies import reset_services

    reset_services()
    yield
    reset_services()


# === AWS Fixtures ===


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"


@pytest.fixture
def dynamodb_client(aws_credentials: None) -> Generator[Any, None, None]:
    """Create a mocked DynamoDB client (SSM is mocked too)."""
    with mock_aws():
        client = boto3.client("dynamodb", region_name="eu-west-1")
        yield client


@pytest.fixture
def create_tables(dynamodb_client: Any) -> list[str]:
    """Create all required DynamoDB tables for testing."""
    from lumina.services.schema import create_tables as create_all

    return create_all(dynamodb_client, TABLE_PREFIX)


# === Service Fixtures ===


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at the evening before the event."""
    return FakeClock(dt.datetime(2026, 2, 20, 21, 0, tzinfo=dt.UTC))


@pytest.fixture
def services(create_tables: list[str], clock: FakeClock) -> Services:
    """Services sharing one DynamoDBService and one event feed."""
    from lumina.services.admin import AdminService
    from lumina.services.admission import AdmissionService
    from lumina.services.directory import GuestDirectoryService
    from lumina.services.dynamodb import DynamoDBService
    from lumina.services.realtime import EventFeed
    from lumina.services.rsvps import RsvpService
    from lumina.services.scans import ScanService
    from lumina.services.stock import StockService
    from lumina.services.verification import VerificationService
    from lumina.services.voting import VotingService

    db = DynamoDBService()
    feed = EventFeed()
    directory = GuestDirectoryService(db)
    verification = VerificationService(directory)
    voting = VotingService(db, feed)
    stock = StockService(db, feed)
    rsvps = RsvpService(db)
    scans = ScanService(db, rsvps, stock)
    admission = AdmissionService(
        db, directory, verification, voting, stock, rsvps, clock=clock
    )
    admin = AdminService(directory, voting, stock, rsvps, scans, clock=clock)
    return Services(
        db=db,
        feed=feed,
        directory=directory,
        verification=verification,
        voting=voting,
        stock=stock,
        rsvps=rsvps,
        scans=scans,
        admission=admission,
        admin=admin,
    )


@pytest.fixture
def seeded(services: Services, clock: FakeClock) -> Services:
    """Default guests, venues, tiers and a config with voting open for a week."""
    from lumina.services.seed import seed_defaults

    seed_defaults(services.directory, services.voting, services.stock, now=clock())
    return services


@pytest.fixture
def voting_closed(seeded: Services, clock: FakeClock) -> Services:
    """Seeded data with the voting deadline an hour in the past."""
    config = seeded.voting.get_config()
    config.voting_deadline = clock() - dt.timedelta(hours=1)
    seeded.voting.save_config(config, now=clock())
    return seeded


# === API Fixtures ===


@pytest.fixture
def api_seeded(create_tables: list[str]) -> None:
    """Seed defaults through the same cached services the API uses."""
    from lumina.api.dependencies import (
        get_directory_service,
        get_stock_service,
        get_voting_service,
    )
    from lumina.services.seed import seed_defaults

    seed_defaults(get_directory_service(), get_voting_service(), get_stock_service())


@pytest.fixture
def admin_auth(create_tables: list[str]) -> tuple[str, str]:
    """Store admin credentials in (mocked) SSM and return them."""
    from lumina.api.dependencies import get_credentials_service

    get_credentials_service().set_credentials(ADMIN_USERNAME, ADMIN_PASSWORD)
    return (ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def client(api_seeded: None) -> Any:
    """Test client for the FastAPI app against seeded mocked tables."""
    from fastapi.testclient import TestClient

    from lumina.api.main import app

    return TestClient(app)
