# File: /viewengine/modules/disclosures.py | Version: 1.0 | Title: Disclosures module view configuration
from viewengine.modules._base import column, cond, group, lanes, options, view
from viewengine.schemas.filters import FilterOperator as Op
from viewengine.schemas.filters import PropertyType as T
from viewengine.schemas.module_config import BoardConfig, ModuleViewConfig

DISCLOSURE_STATUSES = lanes(
    ("pending_review", "Pending Review", "#F59E0B"),
    ("under_review", "Under Review", "#3B82F6"),
    ("approved", "Approved", "#10B981"),
    ("requires_action", "Requires Action", "#EF4444"),
    ("rejected", "Rejected", "#6B7280"),
    ("closed", "Closed", "#374151"),
)
DISCLOSURE_TYPES = options(
    ("conflict_of_interest", "Conflict of Interest"),
    ("gift_received", "Gift Received"),
    ("gift_given", "Gift Given"),
    ("entertainment", "Entertainment"),
    ("outside_activity", "Outside Activity"),
    ("financial_interest", "Financial Interest"),
    ("family_relationship", "Family/Personal Relationship"),
    ("other", "Other"),
)
RISK_LEVELS = options(("low", "Low Risk"), ("medium", "Medium Risk"), ("high", "High Risk"))

_LIST_COLUMNS = ["disclosureNumber", "type", "status", "riskLevel", "submitter", "submittedAt"]

DISCLOSURES_VIEW_CONFIG = ModuleViewConfig(
    entity_type="disclosures",
    entity_name="Disclosures",
    primary_column_id="disclosureNumber",
    columns=[
        column("disclosureNumber", "Disclosure #", T.text, 130, visible=True),
        column("type", "Type", T.enum, 180, visible=True, opts=DISCLOSURE_TYPES),
        column("status", "Status", T.status, 140, visible=True, opts=DISCLOSURE_STATUSES),
        column("riskLevel", "Risk Level", T.enum, 120, visible=True, opts=RISK_LEVELS),
        column("submitter", "Submitter", T.person, 150, visible=True, accessor="submitter.id"),
        column("submitterDepartment", "Department", T.enum, 150, accessor="submitter.department.name"),
        column("submitterTitle", "Job Title", T.text, 150, filterable=False, accessor="submitter.title"),
        column("reviewer", "Reviewer", T.person, 150, accessor="reviewer.id"),
        column("reviewNotes", "Review Notes", T.text, 250, sortable=False, filterable=False),
        column("submittedAt", "Submitted Date", T.date, 150, visible=True),
        column("reviewedAt", "Reviewed Date", T.date, 150),
        column("dueDate", "Due Date", T.date, 120),
        column("giftValue", "Gift Value", T.number, 110),
        column("giftDescription", "Gift Description", T.text, 200, sortable=False),
        column("giftGiver", "Gift Giver", T.text, 150),
        column("thirdParty", "Third Party", T.text, 150),
        column("relationship", "Relationship", T.text, 150, sortable=False),
        column("activityName", "Activity", T.text, 200),
        column("hoursPerWeek", "Hours / Week", T.number, 100),
        column("compensation", "Compensated", T.boolean, 110, sortable=False),
        column("campaignName", "Campaign", T.text, 150, accessor="campaign.name"),
        column("campaignYear", "Campaign Year", T.number, 80, accessor="campaign.year"),
        column("createdCase", "Case Created", T.boolean, 110, sortable=False),
    ],
    quick_filter_property_ids=["type", "status", "riskLevel", "submittedAt"],
    searchable_property_ids=["disclosureNumber", "giftGiver", "thirdParty", "activityName"],
    bulk_action_ids=["assign", "status", "risk", "export", "delete"],
    default_views=[
        view("All Disclosures", "Every disclosure, newest first", _LIST_COLUMNS, "submittedAt"),
        view(
            "Pending Review",
            "Waiting for a reviewer",
            _LIST_COLUMNS,
            "riskLevel",
            "desc",
            group(cond("status", Op.is_any_of, ["pending_review"])),
        ),
        view(
            "High Risk",
            "Disclosures rated high risk",
            _LIST_COLUMNS,
            "submittedAt",
            "desc",
            group(cond("riskLevel", Op.is_any_of, ["high"])),
        ),
        view(
            "Gifts Over $100",
            "Gifts given or received above $100",
            ["disclosureNumber", "type", "status", "giftValue", "giftGiver", "submittedAt"],
            "giftValue",
            "desc",
            group(
                cond("type", Op.is_any_of, ["gift_received", "gift_given"]),
                cond("giftValue", Op.is_greater_than, 100),
            ),
        ),
    ],
    board_config=BoardConfig(
        groupable_by_property_ids=["status", "type", "riskLevel"],
        default_group_by="status",
    ),
)
