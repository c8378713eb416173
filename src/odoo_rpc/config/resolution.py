"""
Relation-resolution policies.
"""

from __future__ import annotations

from dataclasses import dataclass

from .base import AmbiguityPolicy, MissingPolicy

_MISSING_POLICIES = ("omit", "raise")
_AMBIGUITY_POLICIES = ("first", "raise")


@dataclass
class ResolutionConfig:
    """
    How the expander and collapser treat gaps.

    ``expand_missing``: a foreign id with no fetched record is left as
    ``None`` / dropped ("omit") or raises NotFoundError ("raise").
    ``collapse_missing``: a natural key with no match raises ("raise") or is
    dropped from the outgoing values ("omit").
    ``ambiguous_metadata``: several metadata rows for one lookup take the
    first ("first") or raise AmbiguousMetadataError ("raise").
    """

    expand_missing: MissingPolicy = "omit"
    collapse_missing: MissingPolicy = "raise"
    ambiguous_metadata: AmbiguityPolicy = "first"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.expand_missing not in _MISSING_POLICIES:
            raise ValueError(f"Invalid expand_missing: {self.expand_missing}. Must be one of {_MISSING_POLICIES}")
        if self.collapse_missing not in _MISSING_POLICIES:
            raise ValueError(f"Invalid collapse_missing: {self.collapse_missing}. Must be one of {_MISSING_POLICIES}")
        if self.ambiguous_metadata not in _AMBIGUITY_POLICIES:
            raise ValueError(
                f"Invalid ambiguous_metadata: {self.ambiguous_metadata}. Must be one of {_AMBIGUITY_POLICIES}"
            )


__all__ = ["ResolutionConfig"]
