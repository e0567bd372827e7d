from enum import Enum


class ClaimStatus(str, Enum):
    DRAFT = "Draft"
    FOR_ASSESSMENT = "For Assessment"
    APPROVED = "Approved"
    INVOICED = "Invoiced"
    PAID = "Paid"


class SeedStrategy(str, Enum):
    TEMPLATE = "template"
    CLONE = "clone"
    BLANK = "blank"


# Usual progression of a claim; not enforced, used for ordering
CLAIM_STATUS_ORDER = [
    ClaimStatus.DRAFT,
    ClaimStatus.FOR_ASSESSMENT,
    ClaimStatus.APPROVED,
    ClaimStatus.INVOICED,
    ClaimStatus.PAID,
]

# Claims still waiting on the client
PENDING_CLAIM_STATUSES = [ClaimStatus.DRAFT, ClaimStatus.FOR_ASSESSMENT]

DEFAULT_GST_RATE = 0.1
SETTINGS_ID = "default"
EXPORT_SCHEMA_VERSION = 1
