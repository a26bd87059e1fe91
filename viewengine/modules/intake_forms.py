# File: /viewengine/modules/intake_forms.py | Version: 1.0 | Title: Intake form submissions view configuration
from viewengine.modules._base import column, cond, group, lanes, options, view
from viewengine.schemas.filters import FilterOperator as Op
from viewengine.schemas.filters import PropertyType as T
from viewengine.schemas.module_config import BoardConfig, ModuleViewConfig

SUBMISSION_STATUSES = lanes(
    ("draft", "Draft", "#6B7280"),
    ("submitted", "Submitted", "#3B82F6"),
    ("in_review", "In Review", "#F59E0B"),
    ("processed", "Processed", "#10B981"),
    ("cancelled", "Cancelled", "#EF4444"),
)
FORM_TYPES = options(
    ("ethics_report", "Ethics Report"),
    ("incident_report", "Incident Report"),
    ("grievance", "Grievance"),
    ("feedback", "Feedback"),
    ("suggestion", "Suggestion"),
    ("question", "Question"),
    ("compliance_concern", "Compliance Concern"),
    ("other", "Other"),
)
SOURCE_CHANNELS = options(
    ("web_form", "Web Form"),
    ("employee_portal", "Employee Portal"),
    ("ethics_portal", "Ethics Portal"),
    ("mobile_app", "Mobile App"),
)
AI_PRIORITIES = options(("low", "Low"), ("medium", "Medium"), ("high", "High"))

_LIST_COLUMNS = ["submissionId", "formName", "formType", "status", "submitter", "submittedAt"]

INTAKE_FORMS_VIEW_CONFIG = ModuleViewConfig(
    entity_type="intake_forms",
    entity_name="Submissions",
    primary_column_id="submissionId",
    columns=[
        column("submissionId", "Submission #", T.text, 130, visible=True),
        column("formName", "Form", T.enum, 180, visible=True, accessor="form.name"),
        column("formType", "Form Type", T.enum, 150, visible=True, accessor="form.type", opts=FORM_TYPES),
        column("status", "Status", T.status, 120, visible=True, opts=SUBMISSION_STATUSES),
        column("sourceChannel", "Source", T.enum, 130, opts=SOURCE_CHANNELS),
        column("submitter", "Submitter", T.person, 150, visible=True, accessor="submitter.id"),
        column("isAnonymous", "Anonymous", T.boolean, 100, sortable=False),
        column("submitterEmail", "Submitter Email", T.text, 200, filterable=False, accessor="submitter.email"),
        column("submittedAt", "Submitted Date", T.date, 150, visible=True),
        column("processedAt", "Processed Date", T.date, 150),
        column("createdAt", "Created Date", T.date, 150),
        column("assignee", "Assignee", T.person, 150, accessor="assignee.id"),
        column("team", "Team", T.enum, 120, accessor="team.name"),
        column("createdCase", "Case Created", T.boolean, 110, sortable=False),
        column("aiCategory", "AI Category", T.text, 130),
        column("aiPriority", "AI Priority", T.enum, 110, opts=AI_PRIORITIES),
        column("aiSummary", "AI Summary", T.text, 300, sortable=False, filterable=False),
        column("aiConfidence", "AI Confidence", T.number, 110, filterable=False),
    ],
    quick_filter_property_ids=["formType", "status", "submitter", "submittedAt"],
    bulk_action_ids=["assign", "status", "create-cases", "export", "delete"],
    default_views=[
        view("All Submissions", "Every submission, newest first", _LIST_COLUMNS, "submittedAt"),
        view(
            "Pending Review",
            "Submitted or in review",
            _LIST_COLUMNS,
            "submittedAt",
            "asc",
            group(cond("status", Op.is_any_of, ["submitted", "in_review"])),
        ),
        view(
            "Anonymous Reports",
            "Submissions made anonymously",
            _LIST_COLUMNS,
            "submittedAt",
            "desc",
            group(cond("isAnonymous", Op.is_true)),
        ),
    ],
    board_config=BoardConfig(
        groupable_by_property_ids=["status", "formType", "sourceChannel"],
        default_group_by="status",
    ),
)
