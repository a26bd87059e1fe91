# File: /viewengine/modules/investigations.py | Version: 1.0 | Title: Investigations module view configuration
from viewengine.modules._base import CURRENT_USER, TODAY, column, cond, group, lanes, options, view
from viewengine.schemas.filters import FilterOperator as Op
from viewengine.schemas.filters import PropertyType as T
from viewengine.schemas.module_config import BoardConfig, ModuleViewConfig

STAGES = lanes(
    ("planning", "Planning", "#6B7280"),
    ("evidence_gathering", "Evidence Gathering", "#3B82F6"),
    ("interviews", "Interviews", "#8B5CF6"),
    ("analysis", "Analysis", "#F59E0B"),
    ("findings", "Findings", "#EC4899"),
    ("remediation", "Remediation", "#EF4444"),
    ("closed", "Closed", "#10B981"),
)
TYPES = options(
    ("internal", "Internal Investigation"),
    ("external", "External Investigation"),
    ("regulatory", "Regulatory Investigation"),
    ("audit", "Audit Follow-up"),
)
OUTCOMES = options(
    ("substantiated", "Substantiated"),
    ("unsubstantiated", "Unsubstantiated"),
    ("inconclusive", "Inconclusive"),
    ("pending", "Pending"),
)
NOT_CLOSED = cond("stage", Op.is_none_of, ["closed"])

INVESTIGATIONS_VIEW_CONFIG = ModuleViewConfig(
    entity_type="investigations",
    entity_name="Investigations",
    primary_column_id="investigationNumber",
    columns=[
        column("investigationNumber", "Investigation #", T.text, 140, visible=True),
        column("title", "Title", T.text, 250, visible=True),
        column("stage", "Stage", T.status, 150, visible=True, opts=STAGES),
        column("type", "Type", T.enum, 150, visible=True, opts=TYPES),
        column("outcome", "Outcome", T.enum, 130, opts=OUTCOMES),
        column("leadInvestigator", "Lead Investigator", T.person, 150, visible=True, accessor="leadInvestigator.id"),
        column("team", "Team", T.enum, 120, accessor="team.name"),
        column("caseNumber", "Case #", T.text, 120, accessor="case.caseNumber"),
        column("subjectCount", "Subjects", T.number, 100, filterable=False),
        column("startedAt", "Start Date", T.date, 120, visible=True),
        column("targetEndDate", "Target End", T.date, 130),
        column("completedAt", "Completed", T.date, 150),
        column("createdAt", "Created Date", T.date, 150),
        column("interviewCount", "Interviews", T.number, 100, filterable=False),
        column("checklistProgress", "Checklist %", T.number, 100, filterable=False),
        column("documentCount", "Documents", T.number, 100, filterable=False),
    ],
    quick_filter_property_ids=["stage", "type", "leadInvestigator", "startedAt"],
    bulk_action_ids=["assign", "stage", "merge", "export", "delete"],
    default_views=[
        view(
            "All Investigations",
            "All investigations by start date",
            ["investigationNumber", "title", "stage", "type", "leadInvestigator", "startedAt"],
            "startedAt",
        ),
        view(
            "My Investigations",
            "Investigations I lead",
            ["investigationNumber", "title", "stage", "type", "targetEndDate"],
            "targetEndDate",
            "asc",
            group(cond("leadInvestigator", Op.is_any_of, [CURRENT_USER])),
        ),
        view(
            "Active Investigations",
            "Everything not yet closed",
            ["investigationNumber", "title", "stage", "leadInvestigator", "startedAt"],
            "stage",
            "asc",
            group(NOT_CLOSED),
        ),
        view(
            "Overdue",
            "Open investigations past their target end date",
            ["investigationNumber", "title", "stage", "leadInvestigator", "targetEndDate"],
            "targetEndDate",
            "asc",
            group(cond("targetEndDate", Op.is_before, TODAY), NOT_CLOSED),
        ),
    ],
    board_config=BoardConfig(
        groupable_by_property_ids=["stage", "type", "outcome"],
        default_group_by="stage",
    ),
)
