"""
VShell Labs Module

Lab definitions and progress verification.
"""

from .lab import Lab, LabStep, LabType, ConditionType, VerificationCondition
from .verification import (
    VerificationEngine,
    normalize_command,
    verify_guided_step,
    verify_diy_condition,
    verify_diy_lab,
)

__all__ = [
    'Lab',
    'LabStep',
    'LabType',
    'ConditionType',
    'VerificationCondition',
    'VerificationEngine',
    'normalize_command',
    'verify_guided_step',
    'verify_diy_condition',
    'verify_diy_lab',
]
