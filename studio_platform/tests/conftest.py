"""Pytest configuration for ensuring project modules resolve correctly."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from studio_app import create_app
from studio_app.extensions import db
from studio_app.models import Producer, SongRequest, User
from studio_app.services import mail_service
from studio_app.services.drive_client import TokenGrant
from studio_app.services.payment_client import (
    CheckoutSession,
    ConnectAccount,
    PaymentIntent,
    PaymentProviderError,
    Refund,
    Transfer,
)
from studio_app.utils.security import hash_password

PASSWORD = "StrongPass123!"


class FakePaymentClient:
    """In-memory stand-in for the Stripe wrapper."""

    def __init__(self):
        self.sessions: dict[str, CheckoutSession] = {}
        self.session_calls: list[dict] = []
        self.intents: dict[str, PaymentIntent] = {}
        self.refunds: list[dict] = []
        self.cancelled: list[str] = []
        self.transfers: list[dict] = []
        self.accounts: dict[str, ConnectAccount] = {}
        self.fail_transfers = False
        self.fail_refunds_for: set[str] = set()

    def create_checkout_session(self, **kwargs) -> CheckoutSession:
        session_id = f"cs_test_{len(self.sessions) + 1}"
        session = CheckoutSession(
            id=session_id,
            url=f"https://checkout.test/{session_id}",
            amount_total=kwargs["amount_cents"],
            customer_email=kwargs.get("customer_email"),
            metadata=dict(kwargs["metadata"]),
        )
        self.sessions[session_id] = session
        self.session_calls.append(kwargs)
        return session

    def mark_paid(self, session_id: str, intent_id: str = "pi_test_1", status: str = "succeeded"):
        session = self.sessions[session_id]
        session.payment_status = "paid"
        session.payment_intent_id = intent_id
        self.add_intent(intent_id, session.amount_total, status)
        return session

    def add_intent(self, intent_id: str, amount: int, status: str = "succeeded") -> PaymentIntent:
        intent = PaymentIntent(id=intent_id, status=status, amount=amount)
        self.intents[intent_id] = intent
        return intent

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        if session_id not in self.sessions:
            raise PaymentProviderError(f"No such checkout.session: {session_id}")
        return self.sessions[session_id]

    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        if intent_id not in self.intents:
            raise PaymentProviderError(f"No such payment_intent: {intent_id}")
        return self.intents[intent_id]

    def cancel_payment_intent(self, intent_id: str, *, reason: str = "abandoned") -> PaymentIntent:
        intent = self.retrieve_payment_intent(intent_id)
        intent.status = "canceled"
        self.cancelled.append(intent_id)
        return intent

    def create_refund(self, intent_id, *, amount_cents=None, reason="requested_by_customer", metadata=None):
        if intent_id in self.fail_refunds_for:
            raise PaymentProviderError("refund declined")
        intent = self.retrieve_payment_intent(intent_id)
        amount = intent.amount if amount_cents is None else amount_cents
        self.refunds.append(
            {"intent_id": intent_id, "amount": amount, "reason": reason, "metadata": metadata or {}}
        )
        return Refund(id=f"re_test_{len(self.refunds)}", status="succeeded", amount=amount)

    def create_transfer(self, *, amount_cents, destination, transfer_group, metadata=None, idempotency_key=None):
        if self.fail_transfers:
            raise PaymentProviderError("transfers disabled")
        self.transfers.append(
            {
                "amount": amount_cents,
                "destination": destination,
                "transfer_group": transfer_group,
                "metadata": metadata or {},
                "idempotency_key": idempotency_key,
            }
        )
        return Transfer(id=f"tr_test_{len(self.transfers)}", amount=amount_cents, destination=destination)

    def create_connect_account(self, *, email, metadata) -> ConnectAccount:
        account = ConnectAccount(id=f"acct_test_{len(self.accounts) + 1}")
        self.accounts[account.id] = account
        return account

    def retrieve_connect_account(self, account_id: str) -> ConnectAccount:
        return self.accounts[account_id]

    def create_account_link(self, account_id: str, *, refresh_url: str, return_url: str) -> str:
        return f"https://connect.test/onboard/{account_id}"


class FakeDiscordClient:
    def __init__(self):
        self.posts: list[dict] = []
        self.edits: list[dict] = []

    def post_message(self, content, *, embeds=None, components=None, thread_name=None) -> bool:
        self.posts.append(
            {"content": content, "embeds": embeds or [], "components": components or [], "thread_name": thread_name}
        )
        return True

    def edit_original_response(self, interaction_token, *, content, embeds=None, components=None) -> None:
        self.edits.append(
            {"token": interaction_token, "content": content, "embeds": embeds or [], "components": components or []}
        )


class FakeDriveClient:
    def __init__(self):
        self.refreshes = 0
        self.folders: list[str] = []
        self.shared: list[str] = []
        self.uploads: list[dict] = []

    def authorization_url(self, state: str) -> str:
        return f"https://accounts.test/auth?state={state}"

    def exchange_code(self, code: str) -> TokenGrant:
        return TokenGrant(
            access_token=f"access-{code}",
            refresh_token="refresh-token",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )

    def refresh(self, refresh_token: str) -> TokenGrant:
        self.refreshes += 1
        return TokenGrant(
            access_token=f"refreshed-{self.refreshes}",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )

    def create_folder(self, access_token: str, name: str) -> str:
        self.folders.append(name)
        return f"folder-{len(self.folders)}"

    def share_folder(self, access_token: str, folder_id: str) -> bool:
        self.shared.append(folder_id)
        return True

    def start_resumable_upload(self, access_token, *, file_name, mime_type, folder_id) -> str:
        self.uploads.append(
            {"access_token": access_token, "file_name": file_name, "mime_type": mime_type, "folder_id": folder_id}
        )
        return f"https://upload.test/{folder_id}/session"


@pytest.fixture()
def app_with_db():
    app = create_app("test")
    app.extensions["payment_client"] = FakePaymentClient()
    app.extensions["discord_client"] = FakeDiscordClient()
    app.extensions["drive_client"] = FakeDriveClient()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app_with_db):
    return app_with_db.test_client()


@pytest.fixture()
def payments(app_with_db) -> FakePaymentClient:
    return app_with_db.extensions["payment_client"]


@pytest.fixture()
def discord(app_with_db) -> FakeDiscordClient:
    return app_with_db.extensions["discord_client"]


@pytest.fixture()
def drive(app_with_db) -> FakeDriveClient:
    return app_with_db.extensions["drive_client"]


@pytest.fixture()
def sent_emails(app_with_db, monkeypatch):
    """Enable mail and capture every payload handed to the transport."""

    outbox: list[dict] = []

    def fake_post(payload, config):
        outbox.append(payload)
        return {"id": f"msg_{len(outbox)}"}

    monkeypatch.setattr(mail_service, "_post_to_resend", fake_post)
    app_with_db.config.update({"MAIL_ENABLED": True, "RESEND_API_KEY": "re_test"})
    return outbox


def templates_sent(outbox: list[dict]) -> list[str]:
    return [payload.get("headers", {}).get("X-Mail-Template") for payload in outbox]


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def login(client, email: str, password: str = PASSWORD) -> str:
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["access_token"]


def _create_user(email: str, role: str) -> User:
    user = User(email=email, password_hash=hash_password(PASSWORD), role=role)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def customer(app_with_db) -> User:
    return _create_user("customer@example.com", "customer")


@pytest.fixture()
def customer_token(client, customer) -> str:
    return login(client, customer.email)


@pytest.fixture()
def admin_token(app_with_db, client) -> str:
    _create_user("admin@example.com", "admin")
    return login(client, "admin@example.com")


@pytest.fixture()
def producers(app_with_db) -> dict[str, Producer]:
    specs = (
        ("beatsmith", "Hip Hop, Trap", "111"),
        ("soulkeys", "R&B, Soul", "222"),
        ("rockhouse", "Rock, Indie", "333"),
    )
    created = {}
    for slug, genre, discord_id in specs:
        user = _create_user(f"{slug}@example.com", "producer")
        producer = Producer(
            user_id=user.id,
            slug=slug,
            name=slug.title(),
            email=user.email,
            genre=genre,
            discord_user_id=discord_id,
        )
        db.session.add(producer)
        created[slug] = producer
    db.session.commit()
    return created


@pytest.fixture()
def producer_token(client, producers) -> str:
    return login(client, "beatsmith@example.com")


@pytest.fixture()
def make_order(app_with_db, customer, payments):
    """Create a song request directly in the given state."""

    def _make(
        status: str = "paid",
        *,
        producer: Producer | None = None,
        amount_cents: int = 20000,
        intent_status: str = "succeeded",
        revisions: int = 0,
        deadline: datetime | None = None,
        **fields,
    ) -> SongRequest:
        order = SongRequest(
            user_id=customer.id,
            user_email=customer.email,
            song_idea="A summer anthem about the ocean",
            tier="$125",
            price=Decimal(amount_cents) / 100,
            status=status,
            genre_category=fields.pop("genre_category", "hip-hop"),
            number_of_revisions=revisions,
            assigned_producer_id=producer.id if producer else None,
            acceptance_deadline=deadline or datetime.now(timezone.utc) + timedelta(hours=48),
            **fields,
        )
        db.session.add(order)
        db.session.commit()
        intent_id = fields.get("payment_intent_id")
        if intent_id is None and status not in {"pending_payment"}:
            intent_id = f"pi_order_{order.id}"
            order.payment_intent_id = intent_id
            db.session.commit()
        if intent_id:
            payments.add_intent(intent_id, amount_cents, intent_status)
        return order

    return _make
