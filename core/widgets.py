# core/widgets.py
"""
Dashboard widget registry.

Widget ids come from each role's `dashboard_widgets` list (core.roles);
this module maps an id to something that can turn dashboard statistics
into a displayable card. `WidgetRegistry.get` returns None for ids with
no registered widget; `for_role` skips those ids and keeps table order.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from core.policy import DEFAULT_EVALUATOR, PolicyEvaluator

logger = logging.getLogger(__name__)

Stats = Mapping[str, Any]


@dataclass(frozen=True)
class WidgetView:
    id: str
    title: str
    value: Union[str, int, float]
    subtitle: str = ""
    icon: str = ""
    color: str = ""
    trend: Optional[float] = None


def _dig(stats: Stats, *path: str, default: Any = 0) -> Any:
    node: Any = stats
    for key in path:
        if not isinstance(node, Mapping) or key not in node:
            return default
        node = node[key]
    return default if node is None else node


@dataclass(frozen=True)
class DashboardWidget:
    id: str
    title: str
    value: Callable[[Stats], Any]
    subtitle: str = ""
    icon: str = ""
    color: str = ""
    trend: Optional[float] = None

    def render(self, stats: Optional[Stats]) -> WidgetView:
        return WidgetView(
            id=self.id,
            title=self.title,
            value=self.value(stats or {}),
            subtitle=self.subtitle,
            icon=self.icon,
            color=self.color,
            trend=self.trend,
        )


def stat(*path: str, default: Any = 0) -> Callable[[Stats], Any]:
    return lambda stats: _dig(stats, *path, default=default)


def constant(value: Any) -> Callable[[Stats], Any]:
    return lambda _stats: value


class WidgetRegistry:
    def __init__(self):
        self._widgets: Dict[str, DashboardWidget] = {}

    def register(self, widget: DashboardWidget) -> DashboardWidget:
        if widget.id in self._widgets:
            raise ValueError(f"Widget already registered: {widget.id}")
        self._widgets[widget.id] = widget
        return widget

    def get(self, widget_id: str) -> Optional[DashboardWidget]:
        return self._widgets.get(widget_id)

    def __contains__(self, widget_id: str) -> bool:
        return widget_id in self._widgets

    def for_role(self, role_id: Optional[str], evaluator: PolicyEvaluator = DEFAULT_EVALUATOR) -> List[DashboardWidget]:
        widgets = []
        for widget_id in evaluator.get_dashboard_widgets(role_id):
            widget = self.get(widget_id)
            if widget is None:
                logger.debug("No widget registered for %s (role=%s)", widget_id, role_id)
                continue
            widgets.append(widget)
        return widgets

    def render_for_role(self, role_id: Optional[str], stats: Optional[Stats],
                        evaluator: PolicyEvaluator = DEFAULT_EVALUATOR) -> List[WidgetView]:
        return [w.render(stats) for w in self.for_role(role_id, evaluator)]


def _default_registry() -> WidgetRegistry:
    reg = WidgetRegistry()
    for w in [
        DashboardWidget("system_overview", "System Status", constant("Operational"),
                        "All systems running", "📊", "green"),
        DashboardWidget("user_statistics", "Total Users", stat("users", "total"),
                        "Active users", "👥", "blue"),
        DashboardWidget("academic_overview", "Active Courses", stat("academic", "courses", "active"),
                        "This semester", "📚", "violet"),
        DashboardWidget("financial_summary", "Revenue", stat("finance", "revenue"),
                        "This semester", "💰", "green"),
        DashboardWidget("student_statistics", "Total Students", stat("users", "students"),
                        "Enrolled students", "🎓", "blue"),
        DashboardWidget("enrollment_overview", "New Enrollments", stat("academic", "enrollments"),
                        "This semester", "📝", "violet"),
        DashboardWidget("department_overview", "Department Staff", stat("users", "staff"),
                        "Active staff", "🏢", "orange"),
        DashboardWidget("course_assignments", "Course Assignments", stat("academic", "assignments"),
                        "Lecturers assigned", "🗂️", "blue"),
        DashboardWidget("examination_overview", "Upcoming Exams", stat("examinations", "upcoming"),
                        "Next 30 days", "🗂️", "red"),
        DashboardWidget("results_processing", "Results Pending", stat("results", "pending"),
                        "Awaiting approval", "📄", "orange"),
        DashboardWidget("payment_overview", "Payments Received", stat("finance", "payments"),
                        "This month", "💰", "green"),
        DashboardWidget("outstanding_payments", "Outstanding Fees", stat("finance", "outstanding"),
                        "Students with balances", "💵", "red"),
        DashboardWidget("student_activities", "Student Activities", stat("student_affairs", "activities"),
                        "Active programmes", "❤️", "red"),
        DashboardWidget("academic_calendar", "Calendar Events", stat("academic", "events"),
                        "This month", "📅", "blue"),
        DashboardWidget("my_courses", "My Courses", stat("lecturer", "courses"),
                        "Assigned this semester", "📚", "violet"),
        DashboardWidget("assigned_students", "My Students", stat("lecturer", "students"),
                        "Across all courses", "🎓", "blue"),
        DashboardWidget("results_pending", "Results to Upload", stat("lecturer", "results_pending"),
                        "Awaiting upload", "📄", "orange"),
        DashboardWidget("system_analytics", "Reports Generated", stat("mis", "reports"),
                        "This month", "📈", "blue"),
    ]:
        reg.register(w)
    return reg


DEFAULT_WIDGETS = _default_registry()
