"""Release promotion: gate, tag, changelog, merge sequence, notifications."""

from promo.services.promotion.gate import evaluate
from promo.services.promotion.model import (
    Changelog,
    PromotionDecision,
    PromotionOutcome,
    PromotionRequest,
    ReviewStatus,
    Tag,
)
from promo.services.promotion.sequencer import promote
from promo.services.promotion.tags import parse_tag

__all__ = [
    "Changelog",
    "PromotionDecision",
    "PromotionOutcome",
    "PromotionRequest",
    "ReviewStatus",
    "Tag",
    "evaluate",
    "parse_tag",
    "promote",
]
