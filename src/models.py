from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict

# Clockodo sends plain JSON numbers; keep ints as ints
Number = Union[int, float]


class ClockodoModel(BaseModel):
    """Strict base: no coercion, unknown fields ignored."""

    model_config = ConfigDict(strict=True, extra="ignore", frozen=True)


class Paging(ClockodoModel):
    items_per_page: int
    current_page: int
    count_pages: int
    count_items: int


class User(ClockodoModel):
    id: int
    name: str
    email: str
    active: bool
    number: Optional[str] = None
    role: Optional[str] = None
    initials: Optional[str] = None
    language: Optional[str] = None
    timezone: Optional[str] = None
    teams_id: Optional[int] = None
    weekstart_monday: Optional[bool] = None
    weekend_friday: Optional[bool] = None
    timeformat_12h: Optional[bool] = None
    nonbusiness_groups_id: Optional[int] = None
    nonbusinessgroups_id: Optional[int] = None
    work_time_regulations_id: Optional[int] = None
    default_work_time_regulation: Optional[bool] = None
    boss: Any = None
    absence_managers_id: Optional[list[int]] = None
    can_generally_see_absences: Optional[bool] = None
    can_generally_manage_absences: Optional[bool] = None
    can_add_customers: Optional[bool] = None
    default_holidays_count: Optional[bool] = None
    default_target_hours: Optional[bool] = None
    future_coworker: Optional[bool] = None
    start_date: Optional[str] = None
    wage_type: Optional[int] = None
    worktime_regulation_id: Optional[int] = None
    access_groups_ids: Optional[list[int]] = None
    edit_lock: Any = None
    edit_lock_dyn: Any = None
    edit_lock_sync: Any = None
    work_time_edit_lock_days: Optional[int] = None


class Entry(ClockodoModel):
    id: int
    customers_id: int
    projects_id: Optional[int]
    users_id: int
    billable: int
    text: Optional[str]
    time_since: str
    time_until: str
    time_insert: str
    time_last_change: str
    hourly_rate: Optional[Number] = None
    revenue: Optional[Number] = None
    budget_is_hours: Optional[bool] = None
    budget_is_not_strict: Optional[bool] = None
    offset: Optional[int] = None
    clocked: Optional[bool] = None
    locked: Optional[bool] = None


class Budget(ClockodoModel):
    monetary: bool
    hard: bool
    from_subprojects: bool
    interval: Optional[Number] = None
    amount: Optional[Number] = None
    notification_thresholds: Optional[list[Any]] = None


class Project(ClockodoModel):
    id: int
    customers_id: int
    name: str
    number: Optional[str]
    active: bool
    billable_default: bool
    note: Optional[str] = None
    billed_money: Optional[Number] = None
    billed_completely: Optional[bool] = None
    completed: bool
    completed_at: Optional[str]
    revenue_factor: Optional[Number] = None
    test_data: bool
    count_subprojects: int
    deadline: Optional[str] = None
    start_date: Optional[str] = None
    budget: Optional[Budget] = None


class UsersPage(ClockodoModel):
    paging: Paging
    data: list[User]


class EntriesPage(ClockodoModel):
    paging: Paging
    entries: list[Entry]


class ProjectsPage(ClockodoModel):
    paging: Paging
    data: list[Project]


def dump(records: list[ClockodoModel]) -> list[dict[str, Any]]:
    """Plain dicts holding only the fields the remote actually sent."""
    return [record.model_dump(exclude_unset=True) for record in records]
