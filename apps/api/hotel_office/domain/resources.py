"""Back-office resource collections and their access policies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from hotel_office.schemas.auth import Role

RESERVED_KEYS = frozenset({"_id", "createdAt", "updatedAt"})


class Operation(str, Enum):
    CREATE = "create"
    LIST = "list"
    GET = "get"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class Access:
    """``roles is None`` means public; an empty tuple means any authenticated principal."""

    roles: tuple[Role, ...] | None = None

    @property
    def is_public(self) -> bool:
        return self.roles is None


PUBLIC = Access()
AUTHENTICATED = Access(roles=())
ADMIN_ONLY = Access(roles=(Role.ADMIN,))


@dataclass(frozen=True, slots=True)
class Reference:
    """A field holding another collection's document id; ``populate`` names the fields embedded on reads."""

    field: str
    collection: str
    label: str
    populate: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CollectionSpec:
    name: str
    label: str
    path: str
    unique_fields: tuple[str, ...] = ()
    references: tuple[Reference, ...] = ()
    access: dict[Operation, Access] = field(default_factory=dict)

    def access_for(self, operation: Operation) -> Access:
        return self.access.get(operation, PUBLIC)


ROOMS = CollectionSpec(
    name="rooms",
    label="Room",
    path="/rooms",
    unique_fields=("name",),
)

BOOKINGS = CollectionSpec(
    name="bookings",
    label="Booking",
    path="/booking",
    references=(
        Reference(
            field="room",
            collection="rooms",
            label="Room",
            populate=("name", "category", "price"),
        ),
    ),
    access={
        Operation.CREATE: PUBLIC,
        Operation.LIST: ADMIN_ONLY,
        Operation.GET: AUTHENTICATED,
        Operation.UPDATE: AUTHENTICATED,
        Operation.DELETE: ADMIN_ONLY,
    },
)

EMPLOYEES = CollectionSpec(
    name="employees",
    label="Employee",
    path="/employee",
    unique_fields=("email",),
    access={operation: ADMIN_ONLY for operation in Operation},
)

SALARIES = CollectionSpec(
    name="salaries",
    label="Salary",
    path="/salary",
    references=(
        Reference(
            field="employee",
            collection="employees",
            label="Employee",
            populate=("firstName", "lastName", "email", "position"),
        ),
    ),
    access={operation: ADMIN_ONLY for operation in Operation},
)

COLLECTIONS: tuple[CollectionSpec, ...] = (ROOMS, BOOKINGS, EMPLOYEES, SALARIES)
