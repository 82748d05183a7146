"""Proof pipeline error hierarchy.

    PipelineError
      CompileError
      SetupError
      ProveError
        UnsatisfiedWitnessError
      VerifyError

A verification mismatch is not an error: verify() returns False.
"""

from typing import Optional


class PipelineError(Exception):
    pass


class CompileError(PipelineError):
    pass


class SetupError(PipelineError):
    pass


class ProveError(PipelineError):
    pass


class UnsatisfiedWitnessError(ProveError):
    """The assignment violates a constraint.

    Attributes:
        constraint_index: Index of the first failing row
        label: Scope label of that row, e.g. "slot[0]/solvency"
    """

    def __init__(self, constraint_index: int, label: str, message: Optional[str] = None) -> None:
        self.constraint_index = constraint_index
        self.label = label
        super().__init__(message or f"Constraint {constraint_index} ({label}) is not satisfied")


class VerifyError(PipelineError):
    pass
