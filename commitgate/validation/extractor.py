from __future__ import annotations

import re
from typing import List, Optional, Pattern


def extract_issue_ids(
    message: str,
    pattern: Optional[Pattern[str]],
    *,
    group_index: int = 1,
) -> List[str]:
    """
    Return every issue id referenced in a commit message, in order of appearance.

    When the pattern defines capture groups the id is taken from group
    ``min(group_index, pattern.groups)``; otherwise the whole match is used.
    Duplicates are kept.
    """
    if pattern is None or not message:
        return []
    if isinstance(pattern, str):
        pattern = re.compile(pattern)

    group = min(max(0, int(group_index)), pattern.groups)
    issue_ids: List[str] = []
    for match in pattern.finditer(message):
        value = match.group(group)
        if value:
            issue_ids.append(value)
    return issue_ids
