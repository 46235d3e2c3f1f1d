"""Per-table validator synthesis."""

from tablespine.validation.synthesizer import TableValidators, synthesize

__all__ = ["TableValidators", "synthesize"]
