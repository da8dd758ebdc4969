# core/permissions.py
from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, FrozenSet

__all__ = ["Permission", "PERMISSIONS", "RESOURCES", "permission"]


@dataclass(frozen=True)
class Permission:
    """A resource plus the verbs allowed on it. Actions only mean something inside their resource."""
    resource: str
    actions: FrozenSet[str]

    def allows(self, resource: str, action: str) -> bool:
        return self.resource == resource and action in self.actions


def permission(resource: str, actions: Iterable[str]) -> Permission:
    return Permission(resource=resource, actions=frozenset(actions))


# Every controllable capability in the system. Role definitions reference
# these entries (or narrower ad-hoc slices of the same resource).
PERMISSIONS: Mapping[str, Permission] = MappingProxyType({
    # User Management
    "USERS": permission("users", ["create", "read", "update", "delete", "assign_roles", "reset_password"]),
    # Student Management
    "STUDENTS": permission("students", ["create", "read", "update", "delete", "bulk_upload", "export", "view_academic_records"]),
    # Staff Management
    "STAFF": permission("staff", ["create", "read", "update", "delete", "assign_department", "view_workload"]),
    # Course Management
    "COURSES": permission("courses", ["create", "read", "update", "delete", "assign_lecturer", "view_enrollment"]),
    # Department Management
    "DEPARTMENTS": permission("departments", ["create", "read", "update", "delete", "manage_staff", "view_statistics"]),
    # Academic Planning
    "ACADEMIC_PLANNING": permission("academic_planning", ["create_calendar", "manage_semesters", "schedule_exams", "plan_curriculum"]),
    # Results Management
    "RESULTS": permission("results", ["upload", "read", "update", "approve", "publish", "generate_transcripts"]),
    # Financial Management
    "FINANCE": permission("finance", ["view_payments", "process_payments", "generate_reports", "manage_fees"]),
    # Student Affairs
    "STUDENT_AFFAIRS": permission("student_affairs", ["manage_activities", "handle_complaints", "manage_accommodation", "disciplinary_actions"]),
    # Management Information System
    "MIS": permission("mis", ["generate_reports", "view_analytics", "export_data", "system_configuration"]),
    # Examinations
    "EXAMINATIONS": permission("examinations", ["schedule_exams", "manage_venues", "assign_invigilators", "process_results"]),
})

RESOURCES: FrozenSet[str] = frozenset(p.resource for p in PERMISSIONS.values())
