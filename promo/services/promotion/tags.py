from __future__ import annotations

from promo.core.result import Err, Ok, Result
from promo.services.promotion.errors import PromotionError
from promo.services.promotion.model import Tag

BRANCH_SEPARATOR = "/"


def parse_tag(branch_name: str) -> Result[Tag, PromotionError]:
    """Derive the tag from a prefixed branch name.

    Everything after the first separator is the tag, whatever the prefix:
    ``release/1.2.3`` -> ``1.2.3``, ``hotfix/1.2.4`` -> ``1.2.4``.
    """
    prefix, sep, remainder = branch_name.partition(BRANCH_SEPARATOR)
    if not sep:
        return Err(
            PromotionError(
                kind="parse_error",
                message=f"branch {branch_name!r} has no {BRANCH_SEPARATOR!r} separator",
                hint="expected <prefix>/<version>, e.g. release/1.2.3",
            )
        )
    if not remainder:
        return Err(
            PromotionError(
                kind="parse_error",
                message=f"branch {branch_name!r} has nothing after {prefix}{BRANCH_SEPARATOR}",
                hint="expected <prefix>/<version>, e.g. release/1.2.3",
            )
        )
    return Ok(Tag(name=remainder))
