# core/roles.py
"""
University role policy table.

Static, compiled-in configuration: each role id maps to its permissions,
route prefixes, authority level and dashboard widgets. The table is
built once at import time and never mutated.
"""
from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from core.permissions import PERMISSIONS, Permission, permission

__all__ = ["Role", "UNIVERSITY_ROLES", "ROLE_IDS", "WILDCARD_ROUTE", "get_role"]

WILDCARD_ROUTE = "*"


@dataclass(frozen=True)
class Role:
    id: str
    display_name: str
    description: str
    level: int                                  # higher number = higher authority
    permissions: Tuple[Permission, ...]
    allowed_route_prefixes: Tuple[str, ...]
    dashboard_widgets: Tuple[str, ...]


def _role(id: str, display_name: str, description: str, level: int,
          permissions, routes, widgets) -> Role:
    return Role(
        id=id,
        display_name=display_name,
        description=description,
        level=level,
        permissions=tuple(permissions),
        allowed_route_prefixes=tuple(routes),
        dashboard_widgets=tuple(widgets),
    )


P = PERMISSIONS

_ROLES = [
    # ── Highest level: system administrator ──────────────────────────────────
    _role(
        "admin", "System Administrator", "Full system access and control", 100,
        permissions=P.values(),
        routes=[WILDCARD_ROUTE],
        widgets=[
            "system_overview", "user_statistics", "academic_overview",
            "financial_summary", "recent_activities", "system_health",
        ],
    ),

    # ── Senior management ────────────────────────────────────────────────────
    _role(
        "vice_chancellor", "Vice Chancellor", "Chief Executive of the University", 95,
        permissions=[
            P["USERS"], P["STUDENTS"], P["STAFF"], P["COURSES"],
            P["DEPARTMENTS"], P["ACADEMIC_PLANNING"], P["FINANCE"], P["MIS"],
        ],
        routes=[
            "/dashboard", "/executive", "/users", "/students", "/staff",
            "/courses", "/departments", "/academic-planning", "/reports", "/analytics",
        ],
        widgets=[
            "executive_summary", "academic_overview", "financial_summary",
            "enrollment_trends", "performance_metrics",
        ],
    ),

    # ── Academic leadership ──────────────────────────────────────────────────
    _role(
        "deputy_vice_chancellor_academic", "Deputy Vice Chancellor (Academic)",
        "Oversees all academic activities", 90,
        permissions=[
            P["STUDENTS"], P["STAFF"], P["COURSES"], P["DEPARTMENTS"],
            P["ACADEMIC_PLANNING"], P["RESULTS"], P["EXAMINATIONS"],
        ],
        routes=[
            "/dashboard", "/students", "/staff", "/courses", "/departments",
            "/academic-planning", "/results", "/examinations",
        ],
        widgets=[
            "academic_overview", "enrollment_statistics", "course_performance",
            "faculty_workload", "examination_schedule",
        ],
    ),

    # ── Directors ────────────────────────────────────────────────────────────
    _role(
        "director_academic_planning", "Director of Academic Planning",
        "Plans and coordinates academic programs", 80,
        permissions=[
            permission("students", ["read", "view_academic_records"]),
            permission("courses", ["create", "read", "update", "view_enrollment"]),
            permission("departments", ["read", "view_statistics"]),
            P["ACADEMIC_PLANNING"],
            permission("results", ["read", "generate_transcripts"]),
        ],
        routes=["/dashboard", "/courses", "/academic-planning", "/reports/academic"],
        widgets=[
            "academic_calendar", "course_planning", "enrollment_projections",
            "curriculum_status",
        ],
    ),
    _role(
        "director_mis", "Director of MIS",
        "Manages information systems and data analytics", 80,
        permissions=[
            permission("students", ["read", "export"]),
            permission("staff", ["read"]),
            permission("courses", ["read"]),
            P["MIS"],
            permission("finance", ["generate_reports"]),
        ],
        routes=["/dashboard", "/reports", "/analytics", "/data-management"],
        widgets=[
            "system_analytics", "data_insights", "report_generation",
            "system_performance",
        ],
    ),

    # ── Administrative officers ──────────────────────────────────────────────
    _role(
        "registrar", "Registrar",
        "Manages student records and academic administration", 75,
        permissions=[
            P["STUDENTS"],
            permission("staff", ["read"]),
            permission("courses", ["read", "view_enrollment"]),
            permission("results", ["read", "approve", "publish", "generate_transcripts"]),
            P["EXAMINATIONS"],
        ],
        routes=[
            "/dashboard", "/students", "/courses/enrollment", "/results",
            "/examinations", "/transcripts",
        ],
        widgets=[
            "student_statistics", "enrollment_overview", "examination_schedule",
            "transcript_requests",
        ],
    ),

    # ── Department level ─────────────────────────────────────────────────────
    _role(
        "hod", "Head of Department", "Manages departmental activities and staff", 70,
        permissions=[
            permission("students", ["read", "view_academic_records"]),
            permission("staff", ["read", "assign_department", "view_workload"]),
            permission("courses", ["create", "read", "update", "assign_lecturer"]),
            permission("results", ["read", "approve"]),
        ],
        routes=[
            "/dashboard", "/department", "/students", "/staff/department",
            "/courses/department", "/results/department",
        ],
        widgets=[
            "department_overview", "staff_workload", "course_assignments",
            "student_performance",
        ],
    ),

    _role(
        "finance_officer", "Finance Officer",
        "Manages financial transactions and fee collection", 65,
        permissions=[
            permission("students", ["read"]),
            P["FINANCE"],
        ],
        routes=["/dashboard", "/finance", "/payments", "/financial-reports"],
        widgets=[
            "payment_overview", "fee_collection", "financial_reports",
            "outstanding_payments",
        ],
    ),
    _role(
        "exams_records_officer", "Examinations & Records Officer",
        "Manages examinations and academic records", 65,
        permissions=[
            permission("students", ["read", "view_academic_records"]),
            permission("courses", ["read"]),
            permission("results", ["upload", "read", "update"]),
            P["EXAMINATIONS"],
        ],
        routes=["/dashboard", "/examinations", "/results", "/academic-records"],
        widgets=[
            "examination_overview", "results_processing", "academic_records",
            "grade_statistics",
        ],
    ),
    _role(
        "student_affairs_officer", "Student Affairs Officer",
        "Handles student welfare and non-academic activities", 60,
        permissions=[
            permission("students", ["read", "update"]),
            P["STUDENT_AFFAIRS"],
        ],
        routes=["/dashboard", "/students/affairs", "/student-affairs", "/student-welfare"],
        widgets=[
            "student_activities", "accommodation_status", "complaint_tracking",
            "welfare_statistics",
        ],
    ),
    _role(
        "academic_secretary", "Academic Secretary",
        "Supports academic administration and coordination", 55,
        permissions=[
            permission("students", ["read"]),
            permission("staff", ["read"]),
            permission("courses", ["read"]),
            permission("academic_planning", ["create_calendar", "manage_semesters"]),
        ],
        routes=[
            "/dashboard", "/academic-calendar", "/course-schedules",
            "/academic-coordination",
        ],
        widgets=[
            "academic_calendar", "meeting_schedules", "coordination_tasks",
            "academic_notices",
        ],
    ),

    # ── Faculty ──────────────────────────────────────────────────────────────
    _role(
        "lecturer", "Lecturer",
        "Teaching staff with course and result management access", 50,
        permissions=[
            permission("students", ["read"]),
            permission("courses", ["read"]),
            permission("results", ["upload", "read", "update"]),
        ],
        routes=["/dashboard", "/my-courses", "/results-upload", "/student-list"],
        widgets=[
            "my_courses", "assigned_students", "results_pending",
            "teaching_schedule",
        ],
    ),
]

UNIVERSITY_ROLES: Mapping[str, Role] = MappingProxyType({r.id: r for r in _ROLES})
ROLE_IDS: Tuple[str, ...] = tuple(UNIVERSITY_ROLES)

del P


def get_role(role_id: Optional[str]) -> Optional[Role]:
    """Unknown (or legacy) role ids are an expected outcome: returns None, never raises."""
    if not isinstance(role_id, str):
        return None
    return UNIVERSITY_ROLES.get(role_id)
