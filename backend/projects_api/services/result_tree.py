"""
Projects API — Result-Set Tree Assembler
==========================================

What:  Turns the flat result sets of one stored-procedure call into nested
       parent/child trees (projects → serial numbers, statuses → attachments,
       menus → submenus, project → scope history → attachments).
How:   Every result set is already fully materialized by the procedure
       gateway. Child rows are grouped by their normalized link value in one
       pass, then attached to each parent under a named collection.
Who:   Called by the domain services right after `ProcedureClient.call()`.
When:  Once per "get" request; pure and synchronous, no I/O.

Positional contract:
    Result sets carry no names. A procedure documents its output order and
    the caller mirrors it with indexes. Missing result sets or link columns
    raise ProcedureContractViolation instead of producing a partial tree.

Empty collections:
    Each Link declares its own EmptyPolicy:
        EMPTY_LIST → parent["name"] = []
        OMIT       → the key is not present on the parent
"""

import enum
import logging
import math
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from projects_api.exceptions import NotFoundError, ProcedureContractViolation

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
ResultSet = List[Row]


class EmptyPolicy(str, enum.Enum):
    """How a child collection with zero matches is rendered."""

    EMPTY_LIST = "empty_list"
    OMIT = "omit"


@dataclass(frozen=True)
class Link:
    """
    Declares one child collection.

    Attributes:
        name:          Key the collection is stored under on each parent node.
        child_index:   Position of the child result set.
        child_column:  Foreign column in the child rows. None with
                       parent_column=None means "unkeyed": every child row
                       belongs to every parent (single-parent procedures).
        parent_column: Primary column in the parent rows.
        parent_index:  Position of the parent result set (0 = the root set).
        sort_by:       Re-sort children by this column; result-set order otherwise.
        column:        Project each child row down to this single column's value.
        empty:         Rendering of a collection with zero matches.
    """

    name: str
    child_index: int
    child_column: Optional[str] = None
    parent_column: Optional[str] = None
    parent_index: int = 0
    sort_by: Optional[str] = None
    column: Optional[str] = None
    empty: EmptyPolicy = EmptyPolicy.EMPTY_LIST

    def __post_init__(self) -> None:
        if (self.child_column is None) != (self.parent_column is None):
            raise ValueError(
                f"Link '{self.name}' must name both link columns or neither"
            )
        if self.child_index == self.parent_index:
            raise ValueError(
                f"Link '{self.name}' references result set {self.child_index} "
                "as its own parent; use build_menu_tree for self-referencing rows"
            )

    @property
    def keyed(self) -> bool:
        return self.child_column is not None


# ══════════════════════════════════════════════════════════════════════════
# Key normalization
# ══════════════════════════════════════════════════════════════════════════

def normalize_key(value: Any) -> Optional[str]:
    """
    Reduce a link value to a comparable string.

    uniqueidentifier columns arrive as uuid.UUID or as upper-case strings
    depending on the driver; int columns may arrive as Decimal. All of them
    compare equal here when they denote the same key. None and blank strings
    never match anything.
    """
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float):
        if math.isfinite(value) and value == int(value):
            return str(int(value))
        return repr(value)
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return str(int(value))
        return str(value.normalize())
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return str(uuid.UUID(text))
        except ValueError:
            return text
    return str(value)


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

def _sorted(rows: Iterable[Row], column: str) -> List[Row]:
    """Stable sort on one column; rows with a NULL value go last."""
    def key(row: Row):
        value = row.get(column)
        return (value is None, value if value is not None else 0)

    return sorted(rows, key=key)


def _require_result_sets(result_sets: Sequence[ResultSet], count: int, procedure: str) -> None:
    if len(result_sets) < count:
        raise ProcedureContractViolation(
            procedure=procedure,
            detail=f"expected at least {count} result sets, received {len(result_sets)}",
        )


def _require_column(rows: ResultSet, column: str, index: int, procedure: str) -> None:
    # An empty result set still satisfies the contract
    if rows and column not in rows[0]:
        raise ProcedureContractViolation(
            procedure=procedure,
            detail=f"result set {index} has no column '{column}'",
            context={"columns": sorted(rows[0].keys())},
        )


def _group(rows: ResultSet, column: str) -> Dict[str, List[Row]]:
    groups: Dict[str, List[Row]] = {}
    for row in rows:
        key = normalize_key(row.get(column))
        if key is not None:
            groups.setdefault(key, []).append(row)
    return groups


def _attach(parent: Row, link: Link, matched: List[Row]) -> None:
    if link.sort_by:
        matched = _sorted(matched, link.sort_by)
    if link.column:
        items: List[Any] = [row.get(link.column) for row in matched]
    else:
        items = list(matched)

    if not items and link.empty is EmptyPolicy.OMIT:
        parent.pop(link.name, None)
        return
    parent[link.name] = items


def _validate_links(links: Sequence[Link], root_index: int) -> None:
    parent_of: Dict[int, int] = {}
    for link in links:
        if link.child_index == root_index:
            raise ValueError(f"Link '{link.name}' uses the root result set as a child")
        if link.child_index in parent_of:
            raise ValueError(
                f"Result set {link.child_index} is attached by more than one link"
            )
        parent_of[link.child_index] = link.parent_index

    for start in parent_of:
        seen = {start}
        current = start
        while current in parent_of:
            current = parent_of[current]
            if current in seen:
                raise ValueError(f"Links form a cycle through result set {start}")
            seen.add(current)


# ══════════════════════════════════════════════════════════════════════════
# Public API
# ══════════════════════════════════════════════════════════════════════════

def assemble(
    result_sets: Sequence[ResultSet],
    links: Sequence[Link] = (),
    root_index: int = 0,
    root_filter: Optional[Callable[[Row], bool]] = None,
    sort_by: Optional[str] = None,
    procedure: str = "unknown",
) -> List[Row]:
    """
    Assemble the result sets of one procedure call into parent/child trees.

    Args:
        result_sets: Every result set, in the order the procedure returns them.
        links:       Child collections, declared parent-first.
        root_index:  Result set whose rows become the top-level nodes.
        root_filter: Keep only root rows for which this returns True.
        sort_by:     Re-sort the roots by this column (database order otherwise).
        procedure:   Procedure name, used in contract-violation reports.

    Returns:
        New dicts for the root rows; the input rows are not modified.

    Raises:
        ProcedureContractViolation: a referenced result set or link column is missing.
    """
    _validate_links(links, root_index)

    used = {root_index}
    for link in links:
        used.update((link.child_index, link.parent_index))
    _require_result_sets(result_sets, max(used) + 1, procedure)

    nodes: Dict[int, List[Row]] = {
        index: [dict(row) for row in result_sets[index]] for index in used
    }

    for link in links:
        parents = nodes[link.parent_index]
        children = nodes[link.child_index]
        if link.column:
            _require_column(children, link.column, link.child_index, procedure)
        if link.sort_by:
            _require_column(children, link.sort_by, link.child_index, procedure)

        if not link.keyed:
            for parent in parents:
                _attach(parent, link, children)
            continue

        _require_column(parents, link.parent_column, link.parent_index, procedure)
        _require_column(children, link.child_column, link.child_index, procedure)
        groups = _group(children, link.child_column)
        for parent in parents:
            key = normalize_key(parent.get(link.parent_column))
            _attach(parent, link, groups.get(key, []) if key is not None else [])

    roots = nodes[root_index]
    if root_filter is not None:
        roots = [row for row in roots if root_filter(row)]
    if sort_by:
        _require_column(roots, sort_by, root_index, procedure)
        roots = _sorted(roots, sort_by)

    logger.debug(
        "Assembled %d root node(s) from %s (%d result sets, %d links)",
        len(roots), procedure, len(result_sets), len(links),
    )
    return roots


def assemble_one(
    result_sets: Sequence[ResultSet],
    links: Sequence[Link] = (),
    resource: str = "record",
    resource_id: Optional[str] = None,
    message: Optional[str] = None,
    procedure: str = "unknown",
) -> Row:
    """
    Assemble and return the single root node of a "get by id" procedure.

    Raises:
        NotFoundError: the root result set is empty.
        ProcedureContractViolation: see assemble().
    """
    roots = assemble(result_sets, links, procedure=procedure)
    if not roots:
        raise NotFoundError(resource=resource, resource_id=resource_id, message=message)
    return roots[0]


def build_menu_tree(
    rows: ResultSet,
    id_column: str = "menu_id",
    parent_column: str = "main_menu_id",
    order_column: str = "order",
    children_name: str = "submenu",
    empty: EmptyPolicy = EmptyPolicy.OMIT,
    procedure: str = "unknown",
) -> List[Row]:
    """
    Build the two-level menu tree from one self-referencing result set.

    Roots are rows with no parent id, ordered by `order_column`. Each root
    gets the rows pointing at it, also ordered. Rows whose parent is not a
    root (deeper levels, dangling parents) are left out.
    """
    _require_column(rows, id_column, 0, procedure)
    _require_column(rows, parent_column, 0, procedure)
    _require_column(rows, order_column, 0, procedure)

    roots = _sorted(
        (dict(row) for row in rows if normalize_key(row.get(parent_column)) is None),
        order_column,
    )
    groups = _group(rows, parent_column)
    link = Link(name=children_name, child_index=1, sort_by=order_column, empty=empty)

    for root in roots:
        key = normalize_key(root.get(id_column))
        children = [dict(row) for row in groups.get(key, [])] if key is not None else []
        _attach(root, link, children)
    return roots


def menu_roots(
    rows: ResultSet,
    parent_column: str = "main_menu_id",
    order_column: str = "order",
    procedure: str = "unknown",
) -> List[Row]:
    """Top-level menu rows only, ordered, without submenus."""
    return assemble(
        [rows],
        root_filter=lambda row: normalize_key(row.get(parent_column)) is None,
        sort_by=order_column,
        procedure=procedure,
    )


def result_set(
    result_sets: Sequence[ResultSet],
    index: int = 0,
    procedure: str = "unknown",
) -> ResultSet:
    """Rows of one result set, copied."""
    _require_result_sets(result_sets, index + 1, procedure)
    return [dict(row) for row in result_sets[index]]


def first_row(
    result_sets: Sequence[ResultSet],
    index: int = 0,
    procedure: str = "unknown",
) -> Optional[Row]:
    """First row of one result set, or None when that set is empty."""
    _require_result_sets(result_sets, index + 1, procedure)
    rows = result_sets[index]
    return dict(rows[0]) if rows else None


def scalar(
    result_sets: Sequence[ResultSet],
    index: int = 0,
    procedure: str = "unknown",
) -> Any:
    """
    First column of the first row, like ExecuteScalar.

    Raises:
        ProcedureContractViolation: the result set is missing or empty.
    """
    row = first_row(result_sets, index, procedure)
    if not row:
        raise ProcedureContractViolation(
            procedure=procedure,
            detail=f"result set {index} returned no scalar value",
        )
    return next(iter(row.values()))
