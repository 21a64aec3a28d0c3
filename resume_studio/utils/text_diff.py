"""
Word-level diff between an original phrase and its suggested replacement,
used to highlight what a suggestion changes.
"""
import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import List, Tuple

TOKEN_PATTERN = re.compile(r"\S+|\s+")


@dataclass
class DiffSegment:
    text: str
    type: str  # "unchanged", "removed" or "added"


def tokenize(text: str) -> List[str]:
    """Split into words and the whitespace runs between them."""
    return TOKEN_PATTERN.findall(text or "")


def merge_segments(segments: List[DiffSegment]) -> List[DiffSegment]:
    """Collapse consecutive segments of the same type."""
    merged: List[DiffSegment] = []
    for segment in segments:
        if merged and merged[-1].type == segment.type:
            merged[-1] = DiffSegment(merged[-1].text + segment.text, segment.type)
        else:
            merged.append(DiffSegment(segment.text, segment.type))
    return merged


def get_word_diff(original: str, suggested: str) -> Tuple[List[DiffSegment], List[DiffSegment]]:
    """
    Return (original_segments, suggested_segments).
    Original-side segments are "unchanged" or "removed"; suggested-side
    segments are "unchanged" or "added". Each side concatenates back to its input.
    """
    a, b = tokenize(original), tokenize(suggested)
    original_segments: List[DiffSegment] = []
    suggested_segments: List[DiffSegment] = []
    matcher = SequenceMatcher(a=a, b=b, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            original_segments.append(DiffSegment("".join(a[i1:i2]), "unchanged"))
            suggested_segments.append(DiffSegment("".join(b[j1:j2]), "unchanged"))
            continue
        if i2 > i1:
            original_segments.append(DiffSegment("".join(a[i1:i2]), "removed"))
        if j2 > j1:
            suggested_segments.append(DiffSegment("".join(b[j1:j2]), "added"))
    return merge_segments(original_segments), merge_segments(suggested_segments)
