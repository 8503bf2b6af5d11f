from __future__ import annotations


class RuleSetLoadError(RuntimeError):
    """The rule set for a batch could not be assembled; the batch must not run."""
