"""
Unit tests for reporting hierarchy checks.
"""

import pytest

from logistics_erp.hr.hierarchy import has_circular_reporting, get_reporting_chain
from logistics_erp.models.employee_models import Employee


@pytest.fixture
def org_chart():
    """CEO <- VP <- manager <- staff, plus an unrelated employee."""
    return [
        Employee(id="ceo", full_name="Chief Executive"),
        Employee(id="vp", full_name="Vice President", reporting_to="ceo"),
        Employee(id="mgr", full_name="Warehouse Manager", reporting_to="vp"),
        Employee(id="staff", full_name="Forklift Operator", reporting_to="mgr"),
        Employee(id="other", full_name="Driver"),
    ]


class TestHasCircularReporting:
    """Test cases for has_circular_reporting."""

    def test_clearing_manager_never_circular(self, org_chart):
        """Removing a manager cannot create a cycle."""
        assert has_circular_reporting("ceo", None, org_chart) is False

    def test_self_assignment_is_circular(self, org_chart):
        assert has_circular_reporting("staff", "staff", org_chart) is True

    def test_self_assignment_with_empty_snapshot(self):
        assert has_circular_reporting("x", "x", []) is True

    def test_direct_cycle(self):
        """A reports to B; making B report to A closes a loop."""
        employees = [Employee(id="A", reporting_to="B"), Employee(id="B")]

        assert has_circular_reporting("B", "A", employees) is True

    def test_indirect_cycle(self, org_chart):
        """Making the CEO report to someone below them is circular."""
        assert has_circular_reporting("ceo", "staff", org_chart) is True
        assert has_circular_reporting("vp", "mgr", org_chart) is True

    def test_valid_reassignment(self, org_chart):
        assert has_circular_reporting("staff", "vp", org_chart) is False
        assert has_circular_reporting("other", "mgr", org_chart) is False
        assert has_circular_reporting("ceo", "other", org_chart) is False

    def test_moving_down_is_allowed_when_not_above(self, org_chart):
        """Reassigning staff under an unrelated employee is fine."""
        assert has_circular_reporting("staff", "other", org_chart) is False

    def test_unknown_manager_treated_as_top(self, org_chart):
        assert has_circular_reporting("staff", "ghost", org_chart) is False

    def test_unknown_manager_with_empty_snapshot(self):
        assert has_circular_reporting("a", "b", []) is False

    def test_existing_cycle_terminates(self):
        """A snapshot that already loops must not hang the walk."""
        employees = [
            Employee(id="p", reporting_to="q"),
            Employee(id="q", reporting_to="p"),
            Employee(id="z"),
        ]

        assert has_circular_reporting("z", "p", employees) is True

    def test_accepts_raw_rows(self):
        """Storage rows can be passed without converting to Employee."""
        rows = [
            {"id": "A", "reporting_to": "B"},
            {"id": "B", "reporting_to": None},
        ]

        assert has_circular_reporting("B", "A", rows) is True
        assert has_circular_reporting("A", "B", rows) is False

    def test_long_chain(self):
        """Walk succeeds along a chain as long as the snapshot."""
        employees = [Employee(id="e0")] + [
            Employee(id=f"e{i}", reporting_to=f"e{i - 1}") for i in range(1, 200)
        ]

        assert has_circular_reporting("e0", "e199", employees) is True
        assert has_circular_reporting("e199", "e0", employees) is False


class TestGetReportingChain:
    """Test cases for get_reporting_chain."""

    def test_chain_nearest_first(self, org_chart):
        assert get_reporting_chain("staff", org_chart) == ["mgr", "vp", "ceo"]

    def test_top_of_chain(self, org_chart):
        assert get_reporting_chain("ceo", org_chart) == []

    def test_unknown_employee(self, org_chart):
        assert get_reporting_chain("ghost", org_chart) == []

    def test_manager_outside_snapshot(self):
        employees = [Employee(id="a", reporting_to="outside")]

        assert get_reporting_chain("a", employees) == ["outside"]

    def test_cycle_stops_before_repeat(self):
        employees = [
            Employee(id="a", reporting_to="b"),
            Employee(id="b", reporting_to="c"),
            Employee(id="c", reporting_to="b"),
        ]

        assert get_reporting_chain("a", employees) == ["b", "c"]
