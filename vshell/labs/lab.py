"""
Lab Definitions

A lab is either guided (the learner types an expected command for each
step) or DIY (the learner reaches a target filesystem state by any
means, checked by verification conditions).

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any, List


class LabType(Enum):
    GUIDED = 'guided'
    DIY = 'diy'


class ConditionType(Enum):
    """Kinds of filesystem checks a DIY lab can make."""
    DIRECTORY_EXISTS = 'directory_exists'
    FILE_EXISTS = 'file_exists'
    FILE_NOT_EXISTS = 'file_not_exists'
    FILE_CONTAINS = 'file_contains'
    FILE_MATCHES_REGEX = 'file_matches_regex'
    OWNER_EQUALS = 'owner_equals'
    PERMISSION_EQUALS = 'permission_equals'
    SYMLINK_TARGET_EQUALS = 'symlink_target_equals'


@dataclass
class LabStep:
    """One step of a guided lab."""
    instruction: str
    expected_command: str
    hint: Optional[str] = None
    regex_match: bool = False


@dataclass
class VerificationCondition:
    """
    A check against the filesystem.

    Only the fields relevant to ``type`` are consulted: ``content`` for
    file_contains and file_matches_regex, ``mode`` (octal string) for
    permission_equals, ``owner`` for owner_equals and ``target`` for
    symlink_target_equals.
    """
    type: ConditionType
    path: str
    content: Optional[str] = None
    mode: Optional[str] = None
    owner: Optional[str] = None
    target: Optional[str] = None
    message: Optional[str] = None

    def describe(self) -> str:
        """Message shown when the condition is not met."""
        if self.message:
            return self.message
        return f"{self.type.value.replace('_', ' ')}: {self.path}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'VerificationCondition':
        return cls(
            type=ConditionType(data['type']),
            path=data['path'],
            content=data.get('content'),
            mode=data.get('mode'),
            owner=data.get('owner'),
            target=data.get('target'),
            message=data.get('message'),
        )


@dataclass
class Lab:
    """A lab definition."""
    id: str
    title: str
    type: LabType = LabType.GUIDED
    description: str = ''
    steps: List[LabStep] = field(default_factory=list)
    conditions: List[VerificationCondition] = field(default_factory=list)
    completion_message: str = ''
    initial_snapshot: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Lab':
        """
        Build a lab from its JSON form.

        Raises:
            KeyError, ValueError: If a required field is missing or invalid
        """
        return cls(
            id=data['id'],
            title=data['title'],
            type=LabType(data.get('type', 'guided')),
            description=data.get('description', ''),
            steps=[
                LabStep(
                    instruction=s['instruction'],
                    expected_command=s['expectedCommand'] if 'expectedCommand' in s else s['expected_command'],
                    hint=s.get('hint'),
                    regex_match=bool(s.get('regexMatch', s.get('regex_match', False))),
                )
                for s in data.get('steps', [])
            ],
            conditions=[VerificationCondition.from_dict(c) for c in data.get('conditions', [])],
            completion_message=data.get('completionMessage', data.get('completion_message', '')),
            initial_snapshot=data.get('initialSnapshot', data.get('initial_snapshot')),
        )
