# File: /viewengine/modules/cases.py | Version: 1.0 | Title: Cases module view configuration
from viewengine.modules._base import CURRENT_USER, column, cond, group, lanes, options, view
from viewengine.schemas.filters import FilterOperator as Op
from viewengine.schemas.filters import PropertyType as T
from viewengine.schemas.module_config import BoardConfig, ModuleViewConfig

CASE_STATUSES = lanes(
    ("open", "Open", "#3B82F6"),
    ("in_progress", "In Progress", "#F59E0B"),
    ("pending_review", "Pending Review", "#8B5CF6"),
    ("closed", "Closed", "#10B981"),
    ("archived", "Archived", "#6B7280"),
)
PRIORITIES = options(("low", "Low"), ("medium", "Medium"), ("high", "High"), ("critical", "Critical"))
CATEGORIES = options(
    ("harassment", "Harassment"),
    ("discrimination", "Discrimination"),
    ("fraud", "Fraud"),
    ("theft", "Theft"),
    ("conflict_of_interest", "Conflict of Interest"),
    ("safety", "Safety Violation"),
    ("policy_violation", "Policy Violation"),
    ("other", "Other"),
)
SOURCE_CHANNELS = options(
    ("hotline", "Hotline"),
    ("web_form", "Web Form"),
    ("email", "Email"),
    ("chatbot", "Chatbot"),
    ("manager", "Manager Report"),
)

CASES_VIEW_CONFIG = ModuleViewConfig(
    entity_type="cases",
    entity_name="Cases",
    primary_column_id="caseNumber",
    columns=[
        column("caseNumber", "Case #", T.text, 120, visible=True, group="core"),
        column("title", "Title", T.text, 250, visible=True, group="core"),
        column("status", "Status", T.status, 130, visible=True, group="core", opts=CASE_STATUSES),
        column("priority", "Priority", T.enum, 100, visible=True, group="core", opts=PRIORITIES),
        column("category", "Category", T.enum, 150, visible=True, group="core", opts=CATEGORIES),
        column("assignee", "Assignee", T.person, 150, visible=True, group="assignment", accessor="assignee.id"),
        column("team", "Team", T.enum, 120, group="assignment", accessor="team.name"),
        column("createdAt", "Created Date", T.date, 150, visible=True, group="dates"),
        column("updatedAt", "Last Updated", T.date, 150, group="dates"),
        column("dueDate", "Due Date", T.date, 120, group="dates"),
        column("closedAt", "Closed Date", T.date, 150, group="dates"),
        column("sourceChannel", "Source", T.enum, 120, group="source", opts=SOURCE_CHANNELS),
        column("businessUnit", "Business Unit", T.enum, 150, group="organization", accessor="businessUnit.name"),
        column("location", "Location", T.text, 150, group="organization"),
        column("investigationsCount", "Investigations", T.number, 100, filterable=False, group="investigation"),
        column("hasOpenInvestigation", "Active Investigation", T.boolean, 120, sortable=False, group="investigation"),
        column("aiSummary", "AI Summary", T.text, 300, sortable=False, filterable=False, group="ai"),
        column("aiRiskScore", "Risk Score", T.number, 100, group="ai"),
    ],
    quick_filter_property_ids=["status", "priority", "assignee", "createdAt"],
    searchable_property_ids=["caseNumber", "title", "location"],
    bulk_action_ids=["assign", "status", "priority", "export", "delete"],
    default_views=[
        view(
            "All Cases",
            "All cases sorted by creation date",
            ["caseNumber", "title", "status", "priority", "category", "assignee", "createdAt"],
            "createdAt",
        ),
        view(
            "My Cases",
            "Cases assigned to me",
            ["caseNumber", "title", "status", "priority", "dueDate", "updatedAt"],
            "updatedAt",
            "desc",
            group(cond("assignee", Op.is_any_of, [CURRENT_USER])),
        ),
        view(
            "Open Cases",
            "All open and in-progress cases",
            ["caseNumber", "title", "priority", "category", "assignee", "createdAt", "dueDate"],
            "priority",
            "desc",
            group(cond("status", Op.is_any_of, ["open", "in_progress"])),
        ),
        view(
            "High Priority",
            "High and critical priority cases",
            ["caseNumber", "title", "status", "assignee", "dueDate", "createdAt"],
            "createdAt",
            "desc",
            group(cond("priority", Op.is_any_of, ["high", "critical"])),
        ),
    ],
    board_config=BoardConfig(
        groupable_by_property_ids=["status", "priority", "category"],
        default_group_by="status",
    ),
)
