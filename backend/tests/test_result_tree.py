"""
Projects API — Result-Set Tree Assembler Tests
================================================

What we test:
    ✅ Children attach to the right parent; orphans are dropped
    ✅ Keys match across UUID / string / Decimal representations
    ✅ EMPTY_LIST vs OMIT for parents without children
    ✅ Nested links (project → scope → attachments)
    ✅ Menu tree: ordering, two levels, no submenu key when empty
    ✅ Contract violations for missing result sets and columns
"""

import uuid
from decimal import Decimal

import pytest

from projects_api.exceptions import NotFoundError, ProcedureContractViolation
from projects_api.services.result_tree import (
    EmptyPolicy,
    Link,
    assemble,
    assemble_one,
    build_menu_tree,
    first_row,
    menu_roots,
    normalize_key,
    result_set,
    scalar,
)

PROJECTS = [
    {"project_no": 1, "project_name": "Billing"},
    {"project_no": 2, "project_name": "Payroll"},
    {"project_no": 3, "project_name": "Inventory"},
]
SERIALS = [
    {"project_no": 1, "serial_number": "SN-1A"},
    {"project_no": 2, "serial_number": "SN-2A"},
    {"project_no": 1, "serial_number": "SN-1B"},
    {"project_no": 9, "serial_number": "SN-ORPHAN"},
]
SERIAL_LINK = Link(
    name="serial_numbers", child_index=1, child_column="project_no", parent_column="project_no"
)


class TestNormalizeKey:

    def test_uuid_and_upper_case_string_compare_equal(self):
        value = uuid.uuid4()
        assert normalize_key(value) == normalize_key(str(value).upper())

    def test_integral_decimal_matches_int(self):
        assert normalize_key(Decimal("5")) == normalize_key(5) == "5"
        assert normalize_key(5.0) == "5"

    def test_blank_values_never_match(self):
        assert normalize_key(None) is None
        assert normalize_key("") is None
        assert normalize_key("   ") is None

    def test_plain_strings_are_trimmed(self):
        assert normalize_key(" abc ") == "abc"


class TestAssemble:

    def test_children_attach_in_result_set_order(self):
        roots = assemble([PROJECTS, SERIALS], [SERIAL_LINK])

        assert [r["project_no"] for r in roots] == [1, 2, 3]
        assert [s["serial_number"] for s in roots[0]["serial_numbers"]] == ["SN-1A", "SN-1B"]
        assert [s["serial_number"] for s in roots[1]["serial_numbers"]] == ["SN-2A"]

    def test_orphan_children_are_dropped(self):
        roots = assemble([PROJECTS, SERIALS], [SERIAL_LINK])

        attached = [s["serial_number"] for r in roots for s in r["serial_numbers"]]
        assert "SN-ORPHAN" not in attached

    def test_empty_list_policy_gives_empty_collection(self):
        roots = assemble([PROJECTS, SERIALS], [SERIAL_LINK])
        assert roots[2]["serial_numbers"] == []

    def test_omit_policy_leaves_key_out(self):
        link = Link(
            name="serial_numbers",
            child_index=1,
            child_column="project_no",
            parent_column="project_no",
            empty=EmptyPolicy.OMIT,
        )
        roots = assemble([PROJECTS, SERIALS], [link])

        assert "serial_numbers" in roots[0]
        assert "serial_numbers" not in roots[2]

    def test_flattening_gives_back_every_matched_child(self):
        roots = assemble([PROJECTS, SERIALS], [SERIAL_LINK])

        flattened = [child for root in roots for child in root["serial_numbers"]]
        matched = [row for row in SERIALS if row["project_no"] in {1, 2, 3}]
        assert sorted(flattened, key=lambda r: r["serial_number"]) == sorted(
            matched, key=lambda r: r["serial_number"]
        )

    def test_input_rows_are_not_modified(self):
        projects = [dict(row) for row in PROJECTS]
        assemble([projects, SERIALS], [SERIAL_LINK])
        assert projects == PROJECTS

    def test_uuid_keys_match_string_keys(self):
        status_id = uuid.uuid4()
        statuses = [{"status_update_id": status_id, "notes": "Started"}]
        attachments = [{"status_update_id": str(status_id).upper(), "file_url": "/Docs/a.pdf"}]
        link = Link(
            name="attachments",
            child_index=1,
            child_column="status_update_id",
            parent_column="status_update_id",
        )

        roots = assemble([statuses, attachments], [link])
        assert roots[0]["attachments"][0]["file_url"] == "/Docs/a.pdf"

    def test_nested_links(self):
        project = [{"project_no": 7}]
        scopes = [
            {"scope_id": 1, "project_no": 7, "version_no": 1},
            {"scope_id": 2, "project_no": 7, "version_no": 2},
        ]
        files = [
            {"scope_id": 2, "file_url": "/Docs/v2.pdf"},
            {"scope_id": 2, "file_url": "/Docs/v2-annex.pdf"},
        ]
        links = [
            Link(name="scopes", child_index=1, child_column="project_no", parent_column="project_no"),
            Link(
                name="files",
                child_index=2,
                parent_index=1,
                child_column="scope_id",
                parent_column="scope_id",
            ),
        ]

        root = assemble([project, scopes, files], links)[0]

        assert root["scopes"][0]["files"] == []
        assert [f["file_url"] for f in root["scopes"][1]["files"]] == [
            "/Docs/v2.pdf",
            "/Docs/v2-annex.pdf",
        ]

    def test_unkeyed_link_attaches_every_child(self):
        root = assemble(
            [[{"project_no": 7}], [{"stage": "Lead"}, {"stage": "Proposal"}]],
            [Link(name="stage_history", child_index=1)],
        )[0]
        assert [s["stage"] for s in root["stage_history"]] == ["Lead", "Proposal"]

    def test_column_projection(self):
        root = assemble(
            [[{"project_no": 7}], [{"file_url": "/Docs/a.pdf"}, {"file_url": "/Docs/b.pdf"}]],
            [Link(name="urls", child_index=1, column="file_url")],
        )[0]
        assert root["urls"] == ["/Docs/a.pdf", "/Docs/b.pdf"]

    def test_children_sorted_when_requested(self):
        link = Link(
            name="serial_numbers",
            child_index=1,
            child_column="project_no",
            parent_column="project_no",
            sort_by="serial_number",
        )
        children = [
            {"project_no": 1, "serial_number": "B"},
            {"project_no": 1, "serial_number": None},
            {"project_no": 1, "serial_number": "A"},
        ]
        root = assemble([[{"project_no": 1}], children], [link])[0]
        assert [c["serial_number"] for c in root["serial_numbers"]] == ["A", "B", None]

    def test_missing_result_set_is_a_contract_violation(self):
        with pytest.raises(ProcedureContractViolation) as exc_info:
            assemble([PROJECTS], [SERIAL_LINK], procedure="SP_PreSales_GetAll_Confirmed")
        assert exc_info.value.context["procedure"] == "SP_PreSales_GetAll_Confirmed"

    def test_missing_link_column_is_a_contract_violation(self):
        with pytest.raises(ProcedureContractViolation):
            assemble([PROJECTS, [{"serial_number": "SN-1"}]], [SERIAL_LINK])

    def test_empty_child_set_satisfies_contract(self):
        roots = assemble([PROJECTS, []], [SERIAL_LINK])
        assert all(r["serial_numbers"] == [] for r in roots)

    def test_half_keyed_link_is_rejected(self):
        with pytest.raises(ValueError):
            Link(name="broken", child_index=1, child_column="project_no")

    def test_result_set_attached_twice_is_rejected(self):
        links = [Link(name="a", child_index=1), Link(name="b", child_index=1)]
        with pytest.raises(ValueError):
            assemble([PROJECTS, SERIALS], links)

    def test_cyclic_links_are_rejected(self):
        links = [
            Link(name="a", child_index=1, parent_index=2),
            Link(name="b", child_index=2, parent_index=1),
        ]
        with pytest.raises(ValueError):
            assemble([PROJECTS, SERIALS, SERIALS], links)


class TestAssembleOne:

    def test_returns_single_root(self):
        node = assemble_one([[{"project_no": 7}], [{"stage": "Lead"}]], [Link(name="stages", child_index=1)])
        assert node == {"project_no": 7, "stages": [{"stage": "Lead"}]}

    def test_empty_root_set_is_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            assemble_one([[], []], resource="project", message="Project not found")
        assert exc_info.value.message == "Project not found"


class TestMenuTree:

    def _rows(self):
        a, b, c, d = (uuid.uuid4() for _ in range(4))
        rows = [
            {"menu_id": a, "menu_name": "A", "order": 2, "main_menu_id": None},
            {"menu_id": b, "menu_name": "B", "order": 1, "main_menu_id": None},
            {"menu_id": c, "menu_name": "C", "order": 2, "main_menu_id": a},
            {"menu_id": d, "menu_name": "D", "order": 1, "main_menu_id": str(a).upper()},
            {"menu_id": uuid.uuid4(), "menu_name": "Deep", "order": 1, "main_menu_id": c},
            {"menu_id": uuid.uuid4(), "menu_name": "Dangling", "order": 1, "main_menu_id": uuid.uuid4()},
        ]
        return rows

    def test_roots_and_submenus_are_ordered(self):
        tree = build_menu_tree(self._rows())

        assert [m["menu_name"] for m in tree] == ["B", "A"]
        assert [m["menu_name"] for m in tree[1]["submenu"]] == ["D", "C"]

    def test_menu_without_children_has_no_submenu_key(self):
        tree = build_menu_tree(self._rows())
        assert "submenu" not in tree[0]

    def test_deeper_levels_and_dangling_rows_are_left_out(self):
        tree = build_menu_tree(self._rows())

        names = {m["menu_name"] for m in tree}
        names |= {s["menu_name"] for m in tree for s in m.get("submenu", [])}
        assert names == {"A", "B", "C", "D"}

    def test_blank_parent_counts_as_top_level(self):
        tree = build_menu_tree(
            [{"menu_id": uuid.uuid4(), "menu_name": "Home", "order": 1, "main_menu_id": ""}]
        )
        assert [m["menu_name"] for m in tree] == ["Home"]

    def test_empty_list_policy(self):
        tree = build_menu_tree(self._rows(), empty=EmptyPolicy.EMPTY_LIST)
        assert tree[0]["submenu"] == []

    def test_menu_roots(self):
        roots = menu_roots(self._rows())
        assert [m["menu_name"] for m in roots] == ["B", "A"]
        assert all("submenu" not in m for m in roots)

    def test_missing_order_column_is_a_contract_violation(self):
        with pytest.raises(ProcedureContractViolation):
            build_menu_tree([{"menu_id": uuid.uuid4(), "main_menu_id": None}])


class TestRowHelpers:

    def test_first_row_of_empty_set_is_none(self):
        assert first_row([[]]) is None

    def test_first_row_copies(self):
        rows = [[{"status_code": 1}]]
        row = first_row(rows)
        row["status_code"] = 2
        assert rows[0][0]["status_code"] == 1

    def test_scalar_returns_first_column(self):
        assert scalar([[{"project_no": 42, "other": 1}]]) == 42

    def test_scalar_of_empty_set_is_a_contract_violation(self):
        with pytest.raises(ProcedureContractViolation):
            scalar([[]], procedure="SP_PreSales_Create")

    def test_result_set_out_of_range(self):
        with pytest.raises(ProcedureContractViolation):
            result_set([], 0, procedure="usp_GetAllMenus")
