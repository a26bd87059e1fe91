# File: /viewengine/modules/policies.py | Version: 1.0 | Title: Policies module view configuration
from viewengine.modules._base import column, cond, group, lanes, options, view
from viewengine.schemas.filters import DateUnit
from viewengine.schemas.filters import FilterOperator as Op
from viewengine.schemas.filters import PropertyType as T
from viewengine.schemas.module_config import BoardConfig, ModuleViewConfig

POLICY_STATUSES = lanes(
    ("draft", "Draft", "#6B7280"),
    ("pending_review", "Pending Review", "#F59E0B"),
    ("pending_approval", "Pending Approval", "#8B5CF6"),
    ("approved", "Approved", "#3B82F6"),
    ("published", "Published", "#10B981"),
    ("archived", "Archived", "#374151"),
)
POLICY_CATEGORIES = options(
    ("code_of_conduct", "Code of Conduct"),
    ("anti_harassment", "Anti-Harassment"),
    ("data_privacy", "Data Privacy"),
    ("conflict_of_interest", "Conflict of Interest"),
    ("gifts_entertainment", "Gifts & Entertainment"),
    ("whistleblower", "Whistleblower"),
    ("information_security", "Information Security"),
    ("hr", "HR Policy"),
    ("financial", "Financial Controls"),
    ("health_safety", "Health & Safety"),
)

POLICIES_VIEW_CONFIG = ModuleViewConfig(
    entity_type="policies",
    entity_name="Policies",
    primary_column_id="policyNumber",
    columns=[
        column("policyNumber", "Policy #", T.text, 120, visible=True),
        column("title", "Title", T.text, 300, visible=True),
        column("status", "Status", T.status, 140, visible=True, opts=POLICY_STATUSES),
        column("category", "Category", T.enum, 160, visible=True, opts=POLICY_CATEGORIES),
        column("version", "Version", T.text, 80, filterable=False),
        column("owner", "Owner", T.person, 150, visible=True, accessor="owner.id"),
        column("department", "Department", T.enum, 150, accessor="department.name"),
        column("createdBy", "Created By", T.person, 150, accessor="createdBy.id"),
        column("effectiveDate", "Effective Date", T.date, 120, visible=True),
        column("lastReviewDate", "Last Review", T.date, 120),
        column("nextReviewDate", "Next Review", T.date, 120),
        column("publishedAt", "Published", T.date, 150),
        column("createdAt", "Created Date", T.date, 150),
        column("updatedAt", "Last Updated", T.date, 150),
        column("attestationRate", "Attestation %", T.number, 110),
        column("totalAttestations", "Attestations", T.number, 130, filterable=False),
        column("pendingAttestations", "Pending", T.number, 100, filterable=False),
        column("translationsCount", "Translations", T.number, 100, filterable=False),
        column("wordCount", "Words", T.number, 100, filterable=False),
    ],
    quick_filter_property_ids=["status", "category", "owner", "effectiveDate"],
    bulk_action_ids=["assign", "status", "publish", "archive", "export", "delete"],
    default_views=[
        view(
            "All Policies",
            "Every policy by title",
            ["policyNumber", "title", "status", "category", "owner", "effectiveDate"],
            "title",
            "asc",
        ),
        view(
            "Published Policies",
            "Policies currently in force",
            ["policyNumber", "title", "category", "owner", "publishedAt"],
            "publishedAt",
            "desc",
            group(cond("status", Op.is_any_of, ["published"])),
        ),
        view(
            "Review Needed",
            "Last reviewed more than a year ago",
            ["policyNumber", "title", "owner", "lastReviewDate", "nextReviewDate"],
            "lastReviewDate",
            "asc",
            group(cond("lastReviewDate", Op.is_more_than_n_ago, 12, unit=DateUnit.month)),
        ),
        view(
            "Drafts",
            "Work in progress",
            ["policyNumber", "title", "owner", "updatedAt"],
            "updatedAt",
            "desc",
            group(cond("status", Op.is_any_of, ["draft"])),
        ),
    ],
    board_config=BoardConfig(
        groupable_by_property_ids=["status", "category"],
        default_group_by="status",
    ),
)
