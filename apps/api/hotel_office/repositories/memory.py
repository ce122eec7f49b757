"""In-memory document store used by the API and tests."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
import threading
from typing import Any
from uuid import uuid4

from hotel_office.schemas.auth import Role


class DuplicateKeyError(Exception):
    """A write would break a unique index."""

    def __init__(self, field_name: str) -> None:
        self.field = field_name
        super().__init__(f"duplicate key for field {field_name!r}")


class StoreUnavailableError(RuntimeError):
    """The persistence layer could not serve the call."""


@dataclass(slots=True)
class PrincipalRecord:
    id: str
    username: str
    email: str
    role: Role
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class PrincipalCredentialRecord:
    """Privileged projection; only the login lookup returns one."""

    principal: PrincipalRecord
    credential_hash: str


@dataclass(slots=True)
class InMemoryStore:
    """Simple, deterministic persistence layer for scaffolding and tests."""

    principals: dict[str, PrincipalRecord] = field(default_factory=dict)
    credential_hashes: dict[str, str] = field(default_factory=dict)
    documents: dict[str, dict[str, dict[str, Any]]] = field(default_factory=dict)
    principal_write_count: int = 0
    principal_lookup_count: int = 0
    document_write_count: int = 0
    unavailable_message: str | None = None
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def _ensure_available(self) -> None:
        if self.unavailable_message is not None:
            raise StoreUnavailableError(self.unavailable_message)

    # Principals

    def find_by_username_or_email(self, *, username: str, email: str) -> PrincipalRecord | None:
        self._ensure_available()
        with self._lock:
            for record in self.principals.values():
                if record.username == username or record.email == email:
                    return replace(record)
        return None

    def find_by_email_with_credential(self, email: str) -> PrincipalCredentialRecord | None:
        self._ensure_available()
        with self._lock:
            for record in self.principals.values():
                if record.email == email:
                    return PrincipalCredentialRecord(
                        principal=replace(record),
                        credential_hash=self.credential_hashes[record.id],
                    )
        return None

    def find_public_by_id(self, principal_id: str) -> PrincipalRecord | None:
        self._ensure_available()
        self.principal_lookup_count += 1
        record = self.principals.get(principal_id)
        return replace(record) if record is not None else None

    def create_principal(
        self,
        *,
        username: str,
        email: str,
        role: Role,
        credential_hash: str,
    ) -> PrincipalRecord:
        self._ensure_available()
        now = datetime.now(UTC)
        record = PrincipalRecord(
            id=str(uuid4()),
            username=username,
            email=email,
            role=role,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._check_principal_unique(record)
            self.principals[record.id] = record
            self.credential_hashes[record.id] = credential_hash
            self.principal_write_count += 1
        return replace(record)

    def save_principal(
        self,
        record: PrincipalRecord,
        *,
        credential_hash: str | None = None,
    ) -> PrincipalRecord | None:
        """Persist profile fields; ``credential_hash=None`` leaves the stored hash untouched."""
        self._ensure_available()
        with self._lock:
            current = self.principals.get(record.id)
            if current is None:
                return None
            self._check_principal_unique(record)
            stored = replace(record, role=current.role, created_at=current.created_at)
            self.principals[record.id] = stored
            if credential_hash is not None:
                self.credential_hashes[record.id] = credential_hash
            self.principal_write_count += 1
        return replace(stored)

    def delete_principal(self, principal_id: str) -> bool:
        self._ensure_available()
        with self._lock:
            removed = self.principals.pop(principal_id, None)
            self.credential_hashes.pop(principal_id, None)
            if removed is not None:
                self.principal_write_count += 1
        return removed is not None

    def _check_principal_unique(self, record: PrincipalRecord) -> None:
        for other in self.principals.values():
            if other.id == record.id:
                continue
            if other.username == record.username:
                raise DuplicateKeyError("username")
            if other.email == record.email:
                raise DuplicateKeyError("email")

    # Documents

    def create_document(
        self,
        collection: str,
        body: dict[str, Any],
        *,
        unique_fields: tuple[str, ...] = (),
    ) -> dict[str, Any]:
        self._ensure_available()
        now = datetime.now(UTC)
        document = {"_id": str(uuid4()), **deepcopy(body), "createdAt": now, "updatedAt": now}
        with self._lock:
            documents = self.documents.setdefault(collection, {})
            self._check_document_unique(documents, document, unique_fields)
            documents[document["_id"]] = document
            self.document_write_count += 1
        return deepcopy(document)

    def list_documents(self, collection: str) -> list[dict[str, Any]]:
        self._ensure_available()
        with self._lock:
            documents = [deepcopy(doc) for doc in self.documents.get(collection, {}).values()]
        documents.sort(key=lambda doc: doc["createdAt"])
        return documents

    def get_document(self, collection: str, document_id: str) -> dict[str, Any] | None:
        self._ensure_available()
        document = self.documents.get(collection, {}).get(document_id)
        return deepcopy(document) if document is not None else None

    def update_document(
        self,
        collection: str,
        document_id: str,
        changes: dict[str, Any],
        *,
        unique_fields: tuple[str, ...] = (),
    ) -> dict[str, Any] | None:
        self._ensure_available()
        with self._lock:
            documents = self.documents.get(collection, {})
            current = documents.get(document_id)
            if current is None:
                return None
            updated = {**current, **deepcopy(changes), "updatedAt": datetime.now(UTC)}
            self._check_document_unique(documents, updated, unique_fields)
            documents[document_id] = updated
            self.document_write_count += 1
        return deepcopy(updated)

    def delete_document(self, collection: str, document_id: str) -> dict[str, Any] | None:
        self._ensure_available()
        with self._lock:
            removed = self.documents.get(collection, {}).pop(document_id, None)
            if removed is not None:
                self.document_write_count += 1
        return removed

    @staticmethod
    def _check_document_unique(
        documents: dict[str, dict[str, Any]],
        document: dict[str, Any],
        unique_fields: tuple[str, ...],
    ) -> None:
        for field_name in unique_fields:
            if field_name not in document:
                continue
            for other in documents.values():
                if other["_id"] != document["_id"] and other.get(field_name) == document[field_name]:
                    raise DuplicateKeyError(field_name)
