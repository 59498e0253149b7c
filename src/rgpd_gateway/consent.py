"""Consent enforcement: checked before every provider call.

The repository is queried on each call, never cached, so a revocation
takes effect on the very next invocation.  Lookups are always keyed on
(tenant_id, user_id, purpose): a grant under one tenant never satisfies
a check under another.
"""

from __future__ import annotations
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Literal, Protocol

import structlog

from .errors import ConsentError, ConsentFailure

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PurposeIdentifier:
    """Purpose given either by its label or by its stable id."""
    kind: Literal["label", "purpose_id"]
    value: str


@dataclass(frozen=True, slots=True)
class Consent:
    id: str
    tenant_id: str
    user_id: str
    purpose: str
    granted: bool
    purpose_id: str | None = None
    granted_at: datetime | None = None
    revoked_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None


class ConsentRepo(Protocol):
    """Read side of the consent store the gateway depends on."""

    def find_by_user_and_purpose(
        self,
        tenant_id: str,
        user_id: str,
        purpose: str | PurposeIdentifier,
    ) -> Consent | None: ...


def _purpose_value(purpose: str | PurposeIdentifier) -> str:
    return purpose.value if isinstance(purpose, PurposeIdentifier) else purpose


def check_consent(
    repo: ConsentRepo,
    tenant_id: str,
    user_id: str,
    purpose: str | PurposeIdentifier,
) -> None:
    """Raise ConsentError unless the user currently consents to the purpose."""
    if not tenant_id or not user_id or not _purpose_value(purpose):
        raise ConsentError(
            "tenantId, userId and purpose are required",
            ConsentFailure.MISSING_CONTEXT,
        )

    consent = repo.find_by_user_and_purpose(tenant_id, user_id, purpose)

    if consent is None:
        failure = ConsentError(
            "Consent required: user has not granted consent for this purpose",
            ConsentFailure.NOT_FOUND,
        )
    elif consent.is_revoked:
        failure = ConsentError(
            "Consent revoked: user has withdrawn consent for this purpose",
            ConsentFailure.REVOKED,
        )
    elif not consent.granted:
        failure = ConsentError(
            "Consent denied: user consent for purpose is not granted",
            ConsentFailure.DENIED,
        )
    else:
        return

    logger.info(
        "consent_check_failed",
        tenant_id=tenant_id,
        actor_id=user_id,
        reason=failure.reason.value,
    )
    raise failure


class InMemoryConsentRepo:
    """Thread-safe in-process consent store.

    Keeps the latest record per (tenant, user, purpose).  Suitable for
    embedding and tests; production wires a database-backed repo.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[tuple[str, str, str], Consent] = {}

    def grant(
        self,
        tenant_id: str,
        user_id: str,
        purpose: str,
        *,
        purpose_id: str | None = None,
    ) -> Consent:
        now = datetime.now(timezone.utc)
        consent = Consent(
            id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            user_id=user_id,
            purpose=purpose,
            purpose_id=purpose_id,
            granted=True,
            granted_at=now,
            created_at=now,
        )
        self.add(consent)
        return consent

    def deny(self, tenant_id: str, user_id: str, purpose: str) -> Consent:
        consent = Consent(
            id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            user_id=user_id,
            purpose=purpose,
            granted=False,
            created_at=datetime.now(timezone.utc),
        )
        self.add(consent)
        return consent

    def revoke(self, tenant_id: str, user_id: str, purpose: str) -> Consent | None:
        key = (tenant_id, user_id, purpose)
        with self._lock:
            current = self._records.get(key)
            if current is None:
                return None
            revoked = replace(current, revoked_at=datetime.now(timezone.utc))
            self._records[key] = revoked
            return revoked

    def add(self, consent: Consent) -> None:
        with self._lock:
            self._records[(consent.tenant_id, consent.user_id, consent.purpose)] = consent

    def find_by_user_and_purpose(
        self,
        tenant_id: str,
        user_id: str,
        purpose: str | PurposeIdentifier,
    ) -> Consent | None:
        with self._lock:
            if isinstance(purpose, PurposeIdentifier) and purpose.kind == "purpose_id":
                for consent in self._records.values():
                    if (
                        consent.tenant_id == tenant_id
                        and consent.user_id == user_id
                        and consent.purpose_id == purpose.value
                    ):
                        return consent
                return None
            return self._records.get((tenant_id, user_id, _purpose_value(purpose)))
