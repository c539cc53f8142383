"""
Lab Verification

Judges lab progress from command text and filesystem state. Every
check goes through the VFS's public query surface and evaluates as the
learner, so a file the learner cannot read does not count as
containing anything.

Author: YSNRFD
Version: 1.0.0
"""

import re
from typing import List, Tuple

from .lab import Lab, ConditionType, VerificationCondition
from vshell.filesystem.inode import parse_octal_mode
from vshell.filesystem.result import Ok, Err, FsError
from vshell.filesystem.vfs import VirtualFileSystem
from vshell.logger import get_logger


_logger = get_logger('labs')


def normalize_command(command: str) -> str:
    """Collapse runs of whitespace and strip the ends."""
    return ' '.join(command.split())


def verify_guided_step(lab: Lab, step_index: int, raw_command: str) -> bool:
    """
    Check a typed command against a guided step.

    Plain steps compare whitespace-normalised text; ``regex_match``
    steps require the normalised command to match the expected pattern
    in full.
    """
    if not 0 <= step_index < len(lab.steps):
        return False

    step = lab.steps[step_index]
    command = normalize_command(raw_command)

    if step.regex_match:
        try:
            return re.fullmatch(step.expected_command, command) is not None
        except re.error as e:
            _logger.warning(
                "Invalid step pattern",
                context={'lab': lab.id, 'step': step_index, 'error': str(e)}
            )
            return False

    return command == normalize_command(step.expected_command)


def verify_diy_condition(
    condition: VerificationCondition,
    vfs: VirtualFileSystem,
    user_id: str
) -> bool:
    """Evaluate one condition against the filesystem as ``user_id``."""
    kind = condition.type
    path = condition.path

    if kind == ConditionType.DIRECTORY_EXISTS:
        return vfs.is_directory(path, user_id)

    if kind == ConditionType.FILE_EXISTS:
        return vfs.is_file(path, user_id)

    if kind == ConditionType.FILE_NOT_EXISTS:
        result = vfs.lstat(path, user_id)
        return isinstance(result, Err) and result.error == FsError.NOT_FOUND

    if kind in (ConditionType.FILE_CONTAINS, ConditionType.FILE_MATCHES_REGEX):
        result = vfs.read_file(path, user_id)
        if isinstance(result, Err) or condition.content is None:
            return False
        if kind == ConditionType.FILE_CONTAINS:
            return condition.content in result.value
        try:
            return re.search(condition.content, result.value, re.MULTILINE) is not None
        except re.error:
            return False

    if kind == ConditionType.OWNER_EQUALS:
        result = vfs.stat(path, user_id)
        return isinstance(result, Ok) and result.value.owner_id == condition.owner

    if kind == ConditionType.PERMISSION_EQUALS:
        expected = parse_octal_mode((condition.mode or '').lstrip('0').rjust(3, '0'))
        result = vfs.stat(path, user_id)
        return expected is not None and isinstance(result, Ok) and result.value.mode & 0o7777 == expected

    if kind == ConditionType.SYMLINK_TARGET_EQUALS:
        result = vfs.lstat(path, user_id)
        return isinstance(result, Ok) and result.value.is_symlink and result.value.target == condition.target

    return False


def verify_diy_lab(lab: Lab, vfs: VirtualFileSystem, user_id: str) -> Tuple[bool, List[str]]:
    """
    Evaluate every condition of a DIY lab.

    Returns:
        (all conditions met, messages of the failed conditions)
    """
    failed = [c.describe() for c in lab.conditions if not verify_diy_condition(c, vfs, user_id)]
    _logger.debug("Verified lab", context={'lab': lab.id, 'failed': len(failed)})
    return not failed, failed


class VerificationEngine:
    """
    Verification bound to one filesystem and learner.

    Example:
        >>> engine = VerificationEngine(session.vfs, session.user_id)
        >>> engine.check_lab(lab)
        (True, [])
    """

    def __init__(self, vfs: VirtualFileSystem, user_id: str):
        self._vfs = vfs
        self._user = user_id

    def check_step(self, lab: Lab, step_index: int, raw_command: str) -> bool:
        return verify_guided_step(lab, step_index, raw_command)

    def check(self, condition: VerificationCondition) -> bool:
        return verify_diy_condition(condition, self._vfs, self._user)

    def check_lab(self, lab: Lab) -> Tuple[bool, List[str]]:
        return verify_diy_lab(lab, self._vfs, self._user)
