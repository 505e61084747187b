import os

# Must be set before chainvote modules read their configuration
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import date, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from chainvote.db.database import Base, get_db
from chainvote.blockchain.solana_client import SolanaRpcClient, TransactionInfo
from chainvote.core.errors import ExternalServiceError
from chainvote.core.exception import register_exception_handlers
from chainvote.core.time_utils import utc_now
from chainvote.models.user import Admin, Voter
from chainvote.models import polls as poll_models, voting_token  # noqa: F401  register tables
from chainvote.schemas.poll import PollOptionCreate
from chainvote.schemas.user import PrincipalContext
from chainvote.services import identity, poll_lifecycle
from chainvote.api.v1.endpoints.dependencies import get_blockchain_client

# Test database - in-memory SQLite
TEST_DB_URL = "sqlite:///:memory:"

STRONG_PASSWORD = "Passw0rd!"
ISSUE_DATE = date(2020, 5, 17)


class FakeBlockchainClient(SolanaRpcClient):
    """RPC client that answers from an in-memory ledger instead of the network."""

    def __init__(self):
        super().__init__("http://solana.invalid", timeout_seconds=1.0)
        self.transactions = {}
        self.unreachable = False

    def add_transaction(self, signature, signer, succeeded=True, memo=None):
        self.transactions[signature] = TransactionInfo(
            signature=signature,
            slot=245678901,
            block_time=1704189600,
            succeeded=succeeded,
            signers=[signer],
            memo=memo
        )

    def get_transaction(self, signature):
        if self.unreachable:
            raise ExternalServiceError("Failed to reach the blockchain RPC endpoint", rpc_method="getTransaction")
        return self.transactions.get(signature)


def principal_context(principal) -> PrincipalContext:
    return PrincipalContext(
        id=principal.id,
        email=principal.email,
        role=principal.role,
        voter_id=getattr(principal, "voter_id", None)
    )


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def db_session():
    """Fresh in-memory database per test, shared by service calls and the test client"""
    test_engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=test_engine)

    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = testing_session_local()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture
def blockchain():
    return FakeBlockchainClient()


@pytest.fixture(scope="function")
def client(db_session, blockchain):
    """Test client on a fresh app wired to the test database and the fake ledger"""
    from chainvote.api.v1.endpoints import users, auth, polls, tokens

    app = FastAPI(title="Test ChainVote API", version="1.0.0")
    register_exception_handlers(app)
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(polls.router, prefix="/api/v1")
    app.include_router(tokens.router, prefix="/api/v1")

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blockchain_client] = lambda: blockchain

    with TestClient(app) as test_client:
        yield test_client


# Principals
@pytest.fixture
def admin_account(db_session):
    """(Admin, access token) registered through the identity service"""
    return identity.register_admin(
        db_session,
        username="admin",
        email="admin@example.com",
        password=STRONG_PASSWORD,
        wallet_address="AdminWa11et111111111111111111111"
    )


@pytest.fixture
def admin(admin_account) -> Admin:
    return admin_account[0]


@pytest.fixture
def admin_ctx(admin) -> PrincipalContext:
    return principal_context(admin)


@pytest.fixture
def admin_headers(admin_account):
    return bearer(admin_account[1])


@pytest.fixture
def other_admin(db_session) -> Admin:
    admin, _ = identity.register_admin(
        db_session,
        username="other-admin",
        email="other-admin@example.com",
        password=STRONG_PASSWORD,
        wallet_address="OtherAdminWa11et2222222222222222"
    )
    return admin


def register_test_voter(db_session, index: int):
    return identity.register_voter(
        db_session,
        username=f"voter{index}",
        email=f"voter{index}@example.com",
        password=STRONG_PASSWORD,
        wallet_address=f"VoterWa11et{index:03d}xxxxxxxxxxxxxxxxxx",
        national_id=f"10000000{index:02d}",
        issue_date=ISSUE_DATE
    )


@pytest.fixture
def voter_account(db_session):
    """(Voter, access token) registered through the identity service"""
    return register_test_voter(db_session, 1)


@pytest.fixture
def voter(voter_account) -> Voter:
    return voter_account[0]


@pytest.fixture
def voter_ctx(voter) -> PrincipalContext:
    return principal_context(voter)


@pytest.fixture
def voter_headers(voter_account):
    return bearer(voter_account[1])


# Polls
def make_poll(db_session, creator_ctx, start_offset=timedelta(hours=-1), end_offset=timedelta(hours=1), options=("Yes", "No"), now=None, title="Should we adopt the proposal?"):
    now = now or utc_now()
    return poll_lifecycle.create_poll(
        db_session,
        creator_ctx,
        title=title,
        description="Community proposal",
        start_time=now + start_offset,
        end_time=now + end_offset,
        options=[PollOptionCreate(text=text) for text in options],
        now=now
    )


@pytest.fixture
def active_poll(db_session, admin_ctx):
    return make_poll(db_session, admin_ctx)


@pytest.fixture
def pending_poll(db_session, admin_ctx):
    return make_poll(db_session, admin_ctx, start_offset=timedelta(days=1), end_offset=timedelta(days=2))


@pytest.fixture
def closed_poll(db_session, admin_ctx):
    return make_poll(db_session, admin_ctx, start_offset=timedelta(days=-2), end_offset=timedelta(days=-1))


@pytest.fixture
def fixed_now():
    return datetime(2024, 6, 1, 12, 0, 0)
