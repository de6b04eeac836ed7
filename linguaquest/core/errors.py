"""
Error kinds returned by use-cases.

AICODE-NOTE: Use-cases report failures through their result dataclasses
(success=False + error_kind) instead of raising. Interfaces map the kind
to a transport status.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"  # bad input, nothing touched
    NOT_FOUND = "not_found"  # unknown user / exercise, nothing touched
    PERSISTENCE = "persistence"  # storage failed, transaction rolled back
    GENERATOR = "generator"  # AI collaborator failed
