"""Back-office collection routes built from ``CollectionSpec`` declarations."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, params, status

from hotel_office.domain.resources import COLLECTIONS, Access, CollectionSpec, Operation
from hotel_office.repositories.memory import InMemoryStore
from hotel_office.routes.dependencies import get_authenticated_principal, get_store, require_roles
from hotel_office.schemas.error import ErrorResponse, ForbiddenError, ValidationFailedError
from hotel_office.services.documents import DocumentService


def _access_dependencies(access: Access) -> list[params.Depends]:
    if access.is_public:
        return []
    if not access.roles:
        return [Depends(get_authenticated_principal)]
    return [Depends(require_roles(*access.roles))]


def _responses(access: Access, *codes: int) -> dict[int | str, dict[str, Any]]:
    models: dict[int, type] = {400: ValidationFailedError, 404: ErrorResponse, 409: ErrorResponse}
    responses: dict[int | str, dict[str, Any]] = {code: {"model": models[code]} for code in codes}
    if not access.is_public:
        responses[401] = {"model": ErrorResponse}
    if access.roles:
        responses[403] = {"model": ForbiddenError}
    return responses


def build_collection_router(collection: CollectionSpec) -> APIRouter:
    router = APIRouter(prefix=collection.path, tags=[collection.label])

    def get_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> DocumentService:
        return DocumentService(store, collection)

    Service = Annotated[DocumentService, Depends(get_service)]
    DocumentId = Annotated[str, Path(alias="id")]

    create_access = collection.access_for(Operation.CREATE)
    list_access = collection.access_for(Operation.LIST)
    get_access = collection.access_for(Operation.GET)
    update_access = collection.access_for(Operation.UPDATE)
    delete_access = collection.access_for(Operation.DELETE)

    @router.post(
        "",
        status_code=status.HTTP_201_CREATED,
        dependencies=_access_dependencies(create_access),
        responses=_responses(create_access, 400, 404, 409),
        name=f"create_{collection.name}",
    )
    async def create_document(payload: Annotated[dict[str, Any], Body()], service: Service) -> dict[str, Any]:
        return service.create(payload)

    @router.get(
        "",
        dependencies=_access_dependencies(list_access),
        responses=_responses(list_access),
        name=f"list_{collection.name}",
    )
    async def list_documents(service: Service) -> list[dict[str, Any]]:
        return service.list_all()

    @router.get(
        "/{id}",
        dependencies=_access_dependencies(get_access),
        responses=_responses(get_access, 400, 404),
        name=f"get_{collection.name}",
    )
    async def get_document(document_id: DocumentId, service: Service) -> dict[str, Any]:
        return service.get(document_id)

    @router.put(
        "/{id}",
        dependencies=_access_dependencies(update_access),
        responses=_responses(update_access, 400, 404, 409),
        name=f"update_{collection.name}",
    )
    async def update_document(
        document_id: DocumentId,
        payload: Annotated[dict[str, Any], Body()],
        service: Service,
    ) -> dict[str, Any]:
        return service.update(document_id, payload)

    @router.delete(
        "/{id}",
        dependencies=_access_dependencies(delete_access),
        responses=_responses(delete_access, 400, 404),
        name=f"delete_{collection.name}",
    )
    async def delete_document(document_id: DocumentId, service: Service) -> dict[str, Any]:
        return service.delete(document_id)

    return router


collection_routers: list[APIRouter] = [build_collection_router(collection) for collection in COLLECTIONS]
