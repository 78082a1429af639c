"""Stripe client wrapper: checkout sessions, payment intents, refunds, transfers, Connect."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import stripe
from flask import current_app


class PaymentProviderError(RuntimeError):
    """Raised when the payment processor rejects or fails a call."""


@dataclass
class CheckoutSession:
    id: str
    url: Optional[str] = None
    payment_status: str = "unpaid"
    payment_intent_id: Optional[str] = None
    amount_total: Optional[int] = None
    customer_email: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class PaymentIntent:
    id: str
    status: str
    amount: int
    currency: str = "usd"


@dataclass
class Refund:
    id: str
    status: str
    amount: int


@dataclass
class Transfer:
    id: str
    amount: int
    destination: str


@dataclass
class ConnectAccount:
    id: str
    details_submitted: bool = False
    charges_enabled: bool = False
    payouts_enabled: bool = False


def _plain(obj: Any) -> Dict[str, Any]:
    if obj is None:
        return {}
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


def _intent_id(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return getattr(value, "id", None)


@dataclass
class PaymentClient:
    api_key: str
    currency: str = "usd"

    def _require_key(self) -> None:
        if not self.api_key:
            raise PaymentProviderError("STRIPE_SECRET_KEY is not configured")

    def create_checkout_session(
        self,
        *,
        amount_cents: int,
        product_name: str,
        description: str,
        customer_email: str | None,
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
    ) -> CheckoutSession:
        self._require_key()
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode="payment",
                customer_email=customer_email,
                line_items=[
                    {
                        "price_data": {
                            "currency": self.currency,
                            "product_data": {
                                "name": product_name,
                                "description": description,
                            },
                            "unit_amount": amount_cents,
                        },
                        "quantity": 1,
                    }
                ],
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                payment_intent_data={"metadata": metadata},
            )
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc
        return self._session(session)

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        self._require_key()
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc
        return self._session(session)

    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        self._require_key()
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc
        return PaymentIntent(
            id=intent.id,
            status=intent.status,
            amount=int(intent.amount),
            currency=getattr(intent, "currency", self.currency),
        )

    def cancel_payment_intent(self, intent_id: str, *, reason: str = "abandoned") -> PaymentIntent:
        self._require_key()
        try:
            intent = stripe.PaymentIntent.cancel(
                intent_id, api_key=self.api_key, cancellation_reason=reason
            )
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc
        return PaymentIntent(id=intent.id, status=intent.status, amount=int(intent.amount))

    def create_refund(
        self,
        intent_id: str,
        *,
        amount_cents: int | None = None,
        reason: str = "requested_by_customer",
        metadata: Dict[str, str] | None = None,
    ) -> Refund:
        self._require_key()
        params: Dict[str, Any] = {
            "payment_intent": intent_id,
            "reason": reason,
            "metadata": metadata or {},
        }
        if amount_cents is not None:
            params["amount"] = amount_cents
        try:
            refund = stripe.Refund.create(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc
        return Refund(id=refund.id, status=refund.status, amount=int(refund.amount))

    def create_transfer(
        self,
        *,
        amount_cents: int,
        destination: str,
        transfer_group: str,
        metadata: Dict[str, str] | None = None,
        idempotency_key: str | None = None,
    ) -> Transfer:
        self._require_key()
        try:
            transfer = stripe.Transfer.create(
                api_key=self.api_key,
                amount=amount_cents,
                currency=self.currency,
                destination=destination,
                transfer_group=transfer_group,
                metadata=metadata or {},
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc
        return Transfer(id=transfer.id, amount=int(transfer.amount), destination=destination)

    def create_connect_account(self, *, email: str | None, metadata: Dict[str, str]) -> ConnectAccount:
        self._require_key()
        try:
            account = stripe.Account.create(
                api_key=self.api_key,
                type="express",
                country="US",
                email=email,
                capabilities={
                    "card_payments": {"requested": True},
                    "transfers": {"requested": True},
                },
                business_type="individual",
                metadata=metadata,
            )
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc
        return self._account(account)

    def retrieve_connect_account(self, account_id: str) -> ConnectAccount:
        self._require_key()
        try:
            account = stripe.Account.retrieve(account_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc
        return self._account(account)

    def create_account_link(self, account_id: str, *, refresh_url: str, return_url: str) -> str:
        self._require_key()
        try:
            link = stripe.AccountLink.create(
                api_key=self.api_key,
                account=account_id,
                refresh_url=refresh_url,
                return_url=return_url,
                type="account_onboarding",
            )
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc
        return link.url

    @staticmethod
    def _session(session: Any) -> CheckoutSession:
        return CheckoutSession(
            id=session.id,
            url=getattr(session, "url", None),
            payment_status=getattr(session, "payment_status", "unpaid"),
            payment_intent_id=_intent_id(getattr(session, "payment_intent", None)),
            amount_total=getattr(session, "amount_total", None),
            customer_email=getattr(session, "customer_email", None),
            metadata={k: str(v) for k, v in _plain(getattr(session, "metadata", None)).items()},
        )

    @staticmethod
    def _account(account: Any) -> ConnectAccount:
        return ConnectAccount(
            id=account.id,
            details_submitted=bool(getattr(account, "details_submitted", False)),
            charges_enabled=bool(getattr(account, "charges_enabled", False)),
            payouts_enabled=bool(getattr(account, "payouts_enabled", False)),
        )


def get_payment_client() -> PaymentClient:
    app = current_app
    client = app.extensions.get("payment_client")
    if client is None:
        client = PaymentClient(
            api_key=app.config.get("STRIPE_SECRET_KEY", ""),
            currency=app.config.get("STRIPE_CURRENCY", "usd"),
        )
        app.extensions["payment_client"] = client
    return client
