"""
Row ownership policies.

Each policed table has at most one predicate per action. Reads get the
``select`` predicate attached to every ORM SELECT through
``with_loader_criteria``; writes are built with ``guarded_insert``,
``guarded_update`` and ``guarded_delete`` which put the predicate into the
statement itself, so the database evaluates it at write time. A missing
predicate denies the action. Denial is silent: reads return no rows and
writes affect zero rows.

The service role bypasses every policy.
"""
import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from sqlalchemy import cast, delete, event, false, insert, literal, select, true, update
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria
from sqlalchemy.sql.elements import ColumnElement

from grocery.data.models import (
    CartLineModel,
    CategoryModel,
    OrderItemModel,
    OrderModel,
    ProductModel,
    ProfileModel,
)
from grocery.domain.errors import PolicyBypassError
from grocery.security.identity import Identity, current_identity
from grocery.utils.logging import get_logger

logger = get_logger(__name__)

# marks statements built by guarded_*
GUARDED = "row_policy_guarded"

Predicate = Callable[[Identity], ColumnElement]
CheckPredicate = Callable[[Identity, dict], ColumnElement]


class Action(str, Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class TablePolicy:
    model: type
    select: Predicate | None = None
    insert: CheckPredicate | None = None
    update: Predicate | None = None
    delete: Predicate | None = None


def _owner(model) -> Predicate:
    def predicate(identity: Identity) -> ColumnElement:
        if identity.user_id is None:
            return false()
        return model.user_id == identity.user_id
    return predicate


def _owner_check(identity: Identity, values: dict) -> ColumnElement:
    if identity.user_id is None or values.get("user_id") != identity.user_id:
        return false()
    return true()


def _active(model) -> Predicate:
    return lambda identity: model.is_active == true()


def _owns_parent_order(identity: Identity) -> ColumnElement:
    if identity.user_id is None:
        return false()
    owned_orders = select(OrderModel.id).where(OrderModel.user_id == identity.user_id)
    return OrderItemModel.order_id.in_(owned_orders)


def _owns_parent_order_check(identity: Identity, values: dict) -> ColumnElement:
    # checked per item
    if identity.user_id is None:
        return false()
    return (
        select(OrderModel.id)
        .where(OrderModel.id == values.get("order_id"), OrderModel.user_id == identity.user_id)
        .exists()
    )


POLICIES: dict[type, TablePolicy] = {
    policy.model: policy
    for policy in (
        TablePolicy(
            ProfileModel,
            select=_owner(ProfileModel),
            insert=_owner_check,
            update=_owner(ProfileModel),
        ),
        TablePolicy(CategoryModel, select=_active(CategoryModel)),
        TablePolicy(ProductModel, select=_active(ProductModel)),
        TablePolicy(
            CartLineModel,
            select=_owner(CartLineModel),
            insert=_owner_check,
            update=_owner(CartLineModel),
            delete=_owner(CartLineModel),
        ),
        TablePolicy(OrderModel, select=_owner(OrderModel), insert=_owner_check),
        TablePolicy(OrderItemModel, select=_owns_parent_order, insert=_owns_parent_order_check),
    )
}

_POLICIES_BY_TABLE = {model.__table__.name: policy for model, policy in POLICIES.items()}


def row_filter(model, action: Action, identity: Identity) -> ColumnElement | None:
    """WHERE criteria for select/update/delete, ``None`` when nothing restricts the caller."""
    if identity.is_service:
        return None
    policy = POLICIES.get(model)
    if policy is None:
        return None
    predicate = getattr(policy, action.value)
    if predicate is None:
        return false()
    return predicate(identity)


def insert_check(model, values: dict, identity: Identity) -> ColumnElement:
    if identity.is_service:
        return true()
    policy = POLICIES.get(model)
    if policy is None:
        return true()
    if policy.insert is None:
        return false()
    return policy.insert(identity, values)


def loader_criteria(identity: Identity) -> list:
    return [
        with_loader_criteria(model, row_filter(model, Action.SELECT, identity), include_aliases=True)
        for model in POLICIES
    ]


def _literal(column, value: Any, postgres: bool):
    bound = literal(value, column.type)
    # PostgreSQL types bare INSERT .. SELECT params as text
    if postgres:
        bound = cast(bound, column.type)
    return bound.label(column.name)


def guarded_insert(session: Session, model, values: dict, insert_fn=insert):
    """
    Build ``INSERT INTO t (...) SELECT <values> WHERE <with check>``.

    ``insert_fn`` may be a dialect specific ``insert`` so the caller can add
    an ON CONFLICT clause to the returned statement.
    """
    identity = current_identity(session)
    table = model.__table__
    postgres = session.get_bind().dialect.name == "postgresql"

    source = select(
        *[_literal(table.c[name], value, postgres) for name, value in values.items()]
    ).where(insert_check(model, values, identity))

    return (
        insert_fn(table)
        .from_select(list(values), source)
        .execution_options(**{GUARDED: True})
    )


def guarded_update(session: Session, model, *criteria):
    identity = current_identity(session)
    stmt = update(model.__table__).where(*criteria)
    policy_filter = row_filter(model, Action.UPDATE, identity)
    if policy_filter is not None:
        stmt = stmt.where(policy_filter)
    return stmt.execution_options(**{GUARDED: True})


def guarded_delete(session: Session, model, *criteria):
    identity = current_identity(session)
    stmt = delete(model.__table__).where(*criteria)
    policy_filter = row_filter(model, Action.DELETE, identity)
    if policy_filter is not None:
        stmt = stmt.where(policy_filter)
    return stmt.execution_options(**{GUARDED: True})


def conflict_filter(session: Session, model) -> ColumnElement | None:
    """Update predicate for the DO UPDATE branch of an upsert."""
    return row_filter(model, Action.UPDATE, current_identity(session))


@event.listens_for(Session, "do_orm_execute")
def _apply_row_policies(execute_state: ORMExecuteState):
    identity = current_identity(execute_state.session)
    if identity.is_service:
        return

    if execute_state.is_select:
        # column and relationship loads inherit parent criteria
        if execute_state.is_column_load or execute_state.is_relationship_load:
            return
        execute_state.statement = execute_state.statement.options(*loader_criteria(identity))
        return

    if execute_state.is_insert or execute_state.is_update or execute_state.is_delete:
        table = getattr(execute_state.statement, "table", None)
        if getattr(table, "name", None) in _POLICIES_BY_TABLE and not execute_state.execution_options.get(GUARDED):
            raise PolicyBypassError(f"Unguarded write to {table.name} as {identity.role.value}")


@event.listens_for(Session, "before_flush")
def _reject_unguarded_flush(session: Session, flush_context, instances):
    identity = current_identity(session)
    if identity.is_service:
        return
    for obj in itertools.chain(session.new, session.dirty, session.deleted):
        if type(obj) in POLICIES:
            raise PolicyBypassError(
                f"{type(obj).__name__} cannot be flushed as {identity.role.value}, use the guarded statements"
            )
