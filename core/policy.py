"""
Row-level access policies.

Every table gets a set of policies, one per operation, written as
predicates over the caller identity and the row. A policy has two forms
of the same predicate:

- clause(identity): a SQL expression added to the WHERE of any query
  (what a USING clause does in a database row-level security policy)
- check(identity, row): the same rule evaluated on an object in memory,
  used for rows about to be inserted (WITH CHECK)

No policy for a (table, operation) pair means the operation is denied.
Services never compare owners inline, they go through scope() or
authorize().
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from sqlalchemy import false, select, true
from sqlalchemy.orm import Query, object_session

from core.exceptions import AuthenticationRequired, NotFound, PermissionDenied
from models import CartItem, Category, Order, OrderItem, Product
from utils.logger import get_logger

logger = get_logger(__name__)


class Operation(str, Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Identity:
    """Caller as identified by the external auth provider."""
    user_id: str
    email: str | None = None


@dataclass(frozen=True)
class Policy:
    name: str
    clause: Callable[[Identity], Any]
    check: Callable[[Identity, Any], bool]
    authenticated_only: bool = True


def _public(name: str) -> Policy:
    return Policy(
        name=name,
        clause=lambda identity: true(),
        check=lambda identity, row: True,
        authenticated_only=False
    )


def _owned_by_caller(name: str, model) -> Policy:
    return Policy(
        name=name,
        clause=lambda identity: model.user_id == identity.user_id,
        check=lambda identity, row: row.user_id == identity.user_id
    )


def _order_owned_by_caller(name: str) -> Policy:
    def clause(identity: Identity):
        return (
            select(Order.id)
            .where(Order.id == OrderItem.order_id, Order.user_id == identity.user_id)
            .exists()
        )

    def check(identity: Identity, row: OrderItem) -> bool:
        order = row.order
        if order is None and row.order_id is not None:
            session = object_session(row)
            order = session.get(Order, row.order_id) if session else None
        return order is not None and order.user_id == identity.user_id

    return Policy(name=name, clause=clause, check=check)


POLICIES: dict[tuple[type, Operation], Policy] = {
    (Category, Operation.SELECT): _public("Categories are publicly readable"),
    (Product, Operation.SELECT): _public("Products are publicly readable"),

    (CartItem, Operation.SELECT): _owned_by_caller("Users can view own cart items", CartItem),
    (CartItem, Operation.INSERT): _owned_by_caller("Users can insert own cart items", CartItem),
    (CartItem, Operation.UPDATE): _owned_by_caller("Users can update own cart items", CartItem),
    (CartItem, Operation.DELETE): _owned_by_caller("Users can delete own cart items", CartItem),

    # orders are immutable once placed: no update or delete policy
    (Order, Operation.SELECT): _owned_by_caller("Users can view own orders", Order),
    (Order, Operation.INSERT): _owned_by_caller("Users can create own orders", Order),

    (OrderItem, Operation.SELECT): _order_owned_by_caller("Users can view order items for own orders"),
    (OrderItem, Operation.INSERT): _order_owned_by_caller("Users can create order items for own orders"),
}


def get_policy(model, operation: Operation) -> Policy | None:
    return POLICIES.get((model, operation))


def require_identity(identity: Identity | None) -> Identity:
    if identity is None:
        raise AuthenticationRequired()
    return identity


def is_permitted(identity: Identity | None, model, operation: Operation, row) -> bool:
    policy = get_policy(model, operation)
    if policy is None:
        return False
    if identity is None:
        return not policy.authenticated_only
    return bool(policy.check(identity, row))


def policy_clause(model, identity: Identity | None, operation: Operation = Operation.SELECT):
    """SQL predicate matching exactly the rows the caller may touch."""
    policy = get_policy(model, operation)
    if policy is None:
        return false()
    if identity is None:
        return false() if policy.authenticated_only else true()
    return policy.clause(identity)


def scope(query: Query, model, identity: Identity | None,
          operation: Operation = Operation.SELECT) -> Query:
    """Restrict a query to the rows visible to the caller for this operation."""
    return query.filter(policy_clause(model, identity, operation))


def authorize(identity: Identity | None, model, operation: Operation, row) -> None:
    """
    Raise unless the caller may perform the operation on the row.

    Raises:
        AuthenticationRequired: anonymous caller on an owner-scoped table
        PermissionDenied: forbidden insert
        NotFound: forbidden select/update/delete (same answer as a missing row)
    """
    policy = get_policy(model, operation)

    if identity is None and (policy is None or policy.authenticated_only):
        raise AuthenticationRequired()

    if is_permitted(identity, model, operation, row):
        return

    logger.warning(
        "Policy denied access",
        extra={
            "table": model.__tablename__,
            "operation": operation.value,
            "user_id": identity.user_id if identity else None,
            "policy": policy.name if policy else None
        }
    )

    if operation is Operation.INSERT:
        raise PermissionDenied()
    raise NotFound()
