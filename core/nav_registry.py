# core/nav_registry.py
"""
Role-specific sidebar menus.

This is presentation only: an entry missing from a role's menu does not
mean the route guard denies it, and an entry present does not mean the
guard allows it. The per-role trees are kept in step with the route
prefixes in core.roles by tests/test_nav_registry.py.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class NavEntry:
    label: str
    route: Optional[str]          # None for group headers
    icon: str                     # emoji shown in the sidebar
    children: Tuple["NavEntry", ...] = ()

    @property
    def is_group(self) -> bool:
        return bool(self.children)


def _link(label: str, route: str, icon: str) -> NavEntry:
    return NavEntry(label, route, icon)


def _group(label: str, icon: str, *children: NavEntry) -> NavEntry:
    return NavEntry(label, None, icon, tuple(children))


DASHBOARD = _link("Dashboard", "/dashboard", "🏠")


def _admin() -> List[NavEntry]:
    return [
        _group("User Management", "👥",
               _link("All Users", "/users", "👥"),
               _link("Staff Management", "/users/staff", "🧑‍🤝‍🧑"),
               _link("Role Assignment", "/users/roles", "⚙️"),
               _link("Password Reset", "/users/password-reset", "🔑")),
        _group("Student Management", "🎓",
               _link("All Students", "/students", "🎓"),
               _link("Admissions", "/students/admissions", "📋"),
               _link("Bulk Upload", "/students/bulk-upload", "📤")),
        _group("Academic Management", "📚",
               _link("Courses", "/courses", "📚"),
               _link("Departments", "/departments", "🏢"),
               _link("Course Assignments", "/course-allocation", "📝"),
               _link("Academic Planning", "/academic-planning", "📅")),
        _group("Results & Examinations", "📄",
               _link("Results Upload", "/results-upload", "📄"),
               _link("Examination Management", "/examinations", "🗂️"),
               _link("Transcripts", "/transcripts", "📜")),
        _group("Financial Management", "💰",
               _link("Fee Management", "/finance/fees", "💵"),
               _link("Payments", "/finance/payments", "💰"),
               _link("Financial Reports", "/finance/reports", "📊")),
        _group("Reports & Analytics", "📊",
               _link("Academic Reports", "/reports/academic", "📈"),
               _link("Financial Reports", "/reports/financial", "💵"),
               _link("System Analytics", "/reports/analytics", "📊")),
        _link("System Configuration", "/settings", "🛠️"),
    ]


def _vice_chancellor() -> List[NavEntry]:
    return [
        _link("Executive Overview", "/executive", "📈"),
        _group("Academic Management", "📚",
               _link("Departments", "/departments", "🏢"),
               _link("Academic Planning", "/academic-planning", "📅")),
        _link("Reports & Analytics", "/reports", "📊"),
    ]


def _deputy_vice_chancellor_academic() -> List[NavEntry]:
    return [
        _link("Students", "/students", "🎓"),
        _link("Staff", "/staff", "🧑‍🤝‍🧑"),
        _group("Academic Management", "📚",
               _link("Courses", "/courses", "📚"),
               _link("Departments", "/departments", "🏢"),
               _link("Academic Planning", "/academic-planning", "📅")),
        _group("Results & Examinations", "📄",
               _link("Results", "/results", "📄"),
               _link("Examinations", "/examinations", "🗂️")),
    ]


def _director_academic_planning() -> List[NavEntry]:
    return [
        _group("Academic Planning", "📅",
               _link("Academic Calendar", "/academic-planning/calendar", "📅"),
               _link("Curriculum Planning", "/academic-planning/curriculum", "📚"),
               _link("Course Scheduling", "/academic-planning/scheduling", "🗂️")),
        _link("Course Management", "/courses", "📚"),
        _link("Academic Reports", "/reports/academic", "📈"),
    ]


def _director_mis() -> List[NavEntry]:
    return [
        _group("Data Analytics", "📊",
               _link("System Reports", "/analytics/reports", "📈"),
               _link("Data Insights", "/analytics/insights", "📊"),
               _link("Export Data", "/analytics/export", "📤")),
        _link("Data Management", "/data-management", "🛠️"),
    ]


def _registrar() -> List[NavEntry]:
    return [
        _group("Student Management", "🎓",
               _link("All Students", "/students", "🎓"),
               _link("Admissions", "/students/admissions", "📋"),
               _link("Academic Records", "/students/records", "📄"),
               _link("Bulk Upload", "/students/bulk-upload", "📤")),
        _group("Examinations", "🗂️",
               _link("Exam Scheduling", "/examinations/schedule", "📅"),
               _link("Results Processing", "/examinations/results", "📄")),
        _link("Transcripts", "/transcripts", "📜"),
    ]


def _hod() -> List[NavEntry]:
    return [
        _group("Department Management", "🏢",
               _link("Department Overview", "/department/overview", "🏢"),
               _link("Staff Management", "/staff/department", "🧑‍🤝‍🧑"),
               _link("Course Management", "/courses/department", "📚"),
               _link("Course Assignments", "/department/assignments", "📝")),
        _link("Students", "/students/department", "🎓"),
        _link("Results Management", "/results/department", "📄"),
    ]


def _finance_officer() -> List[NavEntry]:
    return [
        _group("Financial Management", "💰",
               _link("Fee Collection", "/finance/fees", "💵"),
               _link("Payment Processing", "/finance/payments", "💰"),
               _link("Financial Reports", "/finance/reports", "📊")),
        _link("Student Accounts", "/finance/student-accounts", "🎓"),
    ]


def _student_affairs_officer() -> List[NavEntry]:
    return [
        _group("Student Affairs", "❤️",
               _link("Student Activities", "/student-affairs/activities", "🧑‍🤝‍🧑"),
               _link("Accommodation", "/student-affairs/accommodation", "🏢"),
               _link("Complaints", "/student-affairs/complaints", "📄")),
        _link("Student Welfare", "/student-welfare", "❤️"),
    ]


def _exams_records_officer() -> List[NavEntry]:
    return [
        _group("Examinations", "🗂️",
               _link("Exam Management", "/examinations/management", "🗂️"),
               _link("Results Processing", "/examinations/results", "📄"),
               _link("Grade Management", "/examinations/grades", "✅")),
        _link("Academic Records", "/academic-records", "📄"),
    ]


def _academic_secretary() -> List[NavEntry]:
    return [
        _group("Academic Coordination", "📅",
               _link("Academic Calendar", "/academic-coordination/calendar", "📅"),
               _link("Meeting Schedules", "/academic-coordination/meetings", "🗂️")),
    ]


def _lecturer() -> List[NavEntry]:
    return [
        _link("My Courses", "/my-courses", "📚"),
        _link("Results Upload", "/results-upload", "📄"),
        _link("Student List", "/student-list", "🎓"),
    ]


_ROLE_MENUS: Dict[str, Callable[[], List[NavEntry]]] = {
    "admin": _admin,
    "vice_chancellor": _vice_chancellor,
    "deputy_vice_chancellor_academic": _deputy_vice_chancellor_academic,
    "director_academic_planning": _director_academic_planning,
    "director_mis": _director_mis,
    "registrar": _registrar,
    "hod": _hod,
    "finance_officer": _finance_officer,
    "student_affairs_officer": _student_affairs_officer,
    "exams_records_officer": _exams_records_officer,
    "academic_secretary": _academic_secretary,
    "lecturer": _lecturer,
}

STUDENT_NAVIGATION: Tuple[NavEntry, ...] = (
    DASHBOARD,
    _link("My Courses", "/courses", "📚"),
    _link("Registration", "/registration", "📝"),
    _link("Payments", "/payments", "💰"),
    _link("Results", "/results", "📄"),
    _link("Schedule", "/schedule", "📅"),
    _link("Profile", "/profile", "👤"),
)


def build_navigation(role_id: Optional[str]) -> List[NavEntry]:
    """Menu for the administrative console. Unknown roles get the dashboard link only."""
    menu = _ROLE_MENUS.get(role_id) if isinstance(role_id, str) else None
    return [DASHBOARD] + (menu() if menu else [])


def build_student_navigation() -> List[NavEntry]:
    return list(STUDENT_NAVIGATION)


def flatten(entries) -> Iterator[NavEntry]:
    """Every entry that carries a route, depth first."""
    for entry in entries:
        if entry.route is not None:
            yield entry
        yield from flatten(entry.children)


def find_entry(entries, route: str) -> Optional[NavEntry]:
    return next((e for e in flatten(entries) if e.route == route), None)
