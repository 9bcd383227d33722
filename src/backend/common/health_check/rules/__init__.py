# Import order is registration order, which is the order rules run in.
from .animals_missing_required_fields import ANIMALS_MISSING_REQUIRED_FIELDS
from .animals_duplicate_ear_tags import ANIMALS_DUPLICATE_EAR_TAGS
from .animals_age_validation import ANIMALS_AGE_VALIDATION
from .health_missing_recent_checkups import HEALTH_MISSING_RECENT_CHECKUPS
from .health_expired_treatments import HEALTH_EXPIRED_TREATMENTS
from .breeding_pregnancy_tracking import BREEDING_PREGNANCY_TRACKING
from .financial_missing_receipts import FINANCIAL_MISSING_RECEIPTS
from .feed_irregular_feeding import FEED_IRREGULAR_FEEDING
from .integrity_orphaned_records import INTEGRITY_ORPHANED_RECORDS

__all__ = [
    "ANIMALS_MISSING_REQUIRED_FIELDS",
    "ANIMALS_DUPLICATE_EAR_TAGS",
    "ANIMALS_AGE_VALIDATION",
    "HEALTH_MISSING_RECENT_CHECKUPS",
    "HEALTH_EXPIRED_TREATMENTS",
    "BREEDING_PREGNANCY_TRACKING",
    "FINANCIAL_MISSING_RECEIPTS",
    "FEED_IRREGULAR_FEEDING",
    "INTEGRITY_ORPHANED_RECORDS",
]
