"""Generic CRUD service over one resource collection."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from hotel_office.domain.resources import RESERVED_KEYS, CollectionSpec
from hotel_office.errors import ApiError, conflict, not_found, validation_failed
from hotel_office.repositories.memory import DuplicateKeyError, InMemoryStore


def is_document_id(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        return str(UUID(value)) == value
    except ValueError:
        return False


class DocumentService:
    def __init__(self, store: InMemoryStore, collection: CollectionSpec) -> None:
        self._store = store
        self._collection = collection

    def create(self, body: dict[str, Any]) -> dict[str, Any]:
        self._check_body(body, creating=True)
        self._check_references(body, creating=True)
        try:
            return self._store.create_document(
                self._collection.name,
                body,
                unique_fields=self._collection.unique_fields,
            )
        except DuplicateKeyError as exc:
            raise self._duplicate(exc) from exc

    def list_all(self) -> list[dict[str, Any]]:
        documents = self._store.list_documents(self._collection.name)
        return [self._populate(document) for document in documents]

    def get(self, document_id: str) -> dict[str, Any]:
        self._check_id(document_id)
        document = self._store.get_document(self._collection.name, document_id)
        if document is None:
            raise not_found(f"{self._collection.label} not found.")
        return self._populate(document)

    def update(self, document_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        self._check_id(document_id)
        self._check_body(changes, creating=False)
        self._check_references(changes, creating=False)
        try:
            document = self._store.update_document(
                self._collection.name,
                document_id,
                changes,
                unique_fields=self._collection.unique_fields,
            )
        except DuplicateKeyError as exc:
            raise self._duplicate(exc) from exc
        if document is None:
            raise not_found(f"{self._collection.label} not found.")
        return document

    def delete(self, document_id: str) -> dict[str, Any]:
        self._check_id(document_id)
        document = self._store.delete_document(self._collection.name, document_id)
        if document is None:
            raise not_found(f"{self._collection.label} not found.")
        return {"message": f"{self._collection.label} deleted successfully.", "deleted": document}

    def _check_id(self, document_id: str) -> None:
        if not is_document_id(document_id):
            raise validation_failed("id", "format", f"Invalid {self._collection.label} ID format.")

    def _check_body(self, body: Any, *, creating: bool) -> None:
        if not isinstance(body, dict):
            raise validation_failed("body", "type", "Request body must be a JSON object.")
        if creating and not body:
            raise validation_failed("body", "required", "Request body must not be empty.")
        reserved = sorted(RESERVED_KEYS.intersection(body))
        if reserved:
            raise validation_failed(reserved[0], "reserved", f"Field {reserved[0]} cannot be set by clients.")

    def _check_references(self, body: dict[str, Any], *, creating: bool) -> None:
        for reference in self._collection.references:
            if reference.field not in body:
                if creating:
                    raise validation_failed(
                        reference.field,
                        "required",
                        f"{reference.label} ID is required",
                    )
                continue
            target_id = body[reference.field]
            if not is_document_id(target_id):
                raise validation_failed(reference.field, "format", f"Invalid {reference.label} ID format.")
            if self._store.get_document(reference.collection, target_id) is None:
                raise not_found(f"{reference.label} not found with the provided ID.")

    def _populate(self, document: dict[str, Any]) -> dict[str, Any]:
        """Embed selected fields of referenced documents; a dangling reference keeps its bare id."""
        for reference in self._collection.references:
            if not reference.populate:
                continue
            target_id = document.get(reference.field)
            if not is_document_id(target_id):
                continue
            target = self._store.get_document(reference.collection, target_id)
            if target is None:
                continue
            embedded = {"_id": target["_id"]}
            embedded.update({name: target[name] for name in reference.populate if name in target})
            document[reference.field] = embedded
        return document

    def _duplicate(self, exc: DuplicateKeyError) -> ApiError:
        return conflict(f"{self._collection.label} with this {exc.field} already exists.", field=exc.field)
