"""
Reporting-line integrity checks.

The ``reporting_to`` links between employees form a graph in which every
employee has at most one manager. That graph must stay acyclic: nobody may
end up, directly or through a chain of managers, reporting to themselves.
"""

import logging
from typing import Optional, Dict, List, Sequence, Union, Mapping, Any

from logistics_erp.models.employee_models import Employee


logger = logging.getLogger(__name__)

EmployeeLike = Union[Employee, Mapping[str, Any]]


def _manager_lookup(employees: Sequence[EmployeeLike]) -> Dict[str, Optional[str]]:
    """Map each employee id to the id of their manager."""
    lookup = {}
    for employee in employees:
        if isinstance(employee, Mapping):
            lookup[employee['id']] = employee.get('reporting_to')
        else:
            lookup[employee.id] = employee.reporting_to
    return lookup


def has_circular_reporting(employee_id: str,
                           proposed_manager_id: Optional[str],
                           employees: Sequence[EmployeeLike]) -> bool:
    """
    Check whether assigning ``proposed_manager_id`` as the manager of
    ``employee_id`` would create a reporting cycle.

    Walks upward from the proposed manager through the current snapshot. The
    walk visits at most ``len(employees) + 1`` people; a longer walk means the
    snapshot already holds a cycle and is reported as circular.

    Args:
        employee_id: Employee being reassigned
        proposed_manager_id: Candidate manager, or None to clear the manager
        employees: Current snapshot of all employees

    Returns:
        True if the assignment would make someone report to themselves
    """
    if proposed_manager_id is None:
        return False

    if proposed_manager_id == employee_id:
        return True

    managers = _manager_lookup(employees)
    # every id in the snapshot plus one manager id that may lie outside it
    max_steps = len(managers) + 1

    current_id = proposed_manager_id
    steps = 0

    while current_id is not None:
        if current_id == employee_id:
            logger.debug(
                f"Assigning {proposed_manager_id} as manager of {employee_id} "
                f"would create a reporting cycle"
            )
            return True

        steps += 1
        if steps > max_steps:
            logger.warning(
                f"Reporting chain above {proposed_manager_id} does not terminate; "
                f"employee snapshot already contains a cycle"
            )
            return True

        current_id = managers.get(current_id)

    return False


def get_reporting_chain(employee_id: str, employees: Sequence[EmployeeLike]) -> List[str]:
    """
    List the managers above an employee, nearest first.

    Stops at the top of the chain or just before the first id that repeats,
    so a malformed snapshot still yields a finite chain.
    """
    managers = _manager_lookup(employees)

    chain: List[str] = []
    seen = {employee_id}
    current_id = managers.get(employee_id)

    while current_id is not None and current_id not in seen:
        chain.append(current_id)
        seen.add(current_id)
        current_id = managers.get(current_id)

    return chain
