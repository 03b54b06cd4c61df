import re
from functools import lru_cache
from typing import Dict, List, NamedTuple, Optional, Sequence

from prompts import SECTION_LABELS, FALLBACK_LABEL

# --- REGEX PATTERNS ---
REGEX_PATTERNS = {
    'code_fence_open': re.compile(r'^```[\w-]*[ \t]*\n'),
    'code_fence_close': re.compile(r'\n?```\s*$'),
    'excess_newlines': re.compile(r"\n{3,}"),
    'backticks': re.compile(r'[\`]'),
    'blank_runs': re.compile(r'\n\n+'),
}

# Markdown decoration models like to wrap headings in ("## RESULT", "**RESULT:**").
_DECOR_OPEN = r"(?:#{1,6}[ \t]*)?(?:\*\*|__)?"
_DECOR_CLOSE = r"(?:\*\*|__)?"
_SEPARATOR = r"[:\-–—]"


class HeadingMatch(NamedTuple):
    label: str
    start: int
    body_start: int


def sanitize_input(text: str, max_length: int = 500) -> str:
    if not text: return ""
    sanitized = REGEX_PATTERNS['backticks'].sub('', str(text))
    sanitized = REGEX_PATTERNS['blank_runs'].sub(' ', sanitized).strip()
    return (sanitized[:max_length] + "...") if len(sanitized) > max_length else sanitized


def clean_output(text: str) -> str:
    if not text: return ""
    text = text.strip()
    text = REGEX_PATTERNS['code_fence_open'].sub("", text)
    text = REGEX_PATTERNS['code_fence_close'].sub("", text)
    text = REGEX_PATTERNS['excess_newlines'].sub("\n\n", text)
    return text.strip()


def _label_key(label: str) -> str:
    return " ".join(label.split()).upper()


def _label_alternation(labels: Sequence[str]) -> str:
    # Words may be separated by any run of spaces/tabs ("SKILL  LEVEL REQUIRED").
    return "|".join(r"[ \t]+".join(re.escape(w) for w in label.split()) for label in labels)


@lru_cache(maxsize=32)
def _compile_heading_pattern(labels: tuple, require_separator: bool) -> re.Pattern:
    alternation = _label_alternation(labels)
    if require_separator:
        tail = rf"{_SEPARATOR}[ \t]*{_DECOR_CLOSE}"
    else:
        # A bare heading is only accepted when it is the whole line.
        tail = rf"(?:{_SEPARATOR}[ \t]*{_DECOR_CLOSE}|(?=\n|\Z))"
    pattern = (
        rf"^[ \t]*{_DECOR_OPEN}[ \t]*(?P<label>{alternation})[ \t]*{_DECOR_CLOSE}[ \t]*{tail}[ \t]*"
    )
    return re.compile(pattern, re.IGNORECASE | re.MULTILINE)


def build_heading_pattern(labels: Optional[Sequence[str]] = None,
                          require_separator: bool = False) -> re.Pattern:
    """Case-insensitive, line-anchored pattern matching any of `labels`.

    Alternatives are tried in declaration order (first match, not longest).
    Every alternative must be followed by a separator or the end of its line,
    so a shorter label never claims a longer label's heading.
    """
    return _compile_heading_pattern(tuple(labels or SECTION_LABELS), require_separator)


def find_headings(text: str, labels: Optional[Sequence[str]] = None) -> List[HeadingMatch]:
    labels = list(labels or SECTION_LABELS)
    if not text:
        return []
    canonical = {_label_key(label): label for label in labels}
    pattern = build_heading_pattern(labels)
    return [
        HeadingMatch(canonical[_label_key(m.group('label'))], m.start(), m.end())
        for m in pattern.finditer(text)
    ]


def clean_section_body(body: str, labels: Optional[Sequence[str]] = None) -> str:
    """Trim lines, drop blanks and strip repeated headings from a section body."""
    if not body: return ""
    heading = build_heading_pattern(labels, require_separator=True)
    cleaned = []
    for line in body.split('\n'):
        line = line.strip()
        m = heading.match(line)
        if m:
            line = line[m.end():].strip()
        if line:
            cleaned.append(line)
    return '\n'.join(cleaned)


def extract_sections(text: Optional[str],
                     labels: Optional[Sequence[str]] = None,
                     fallback_label: Optional[str] = FALLBACK_LABEL) -> Dict[str, str]:
    """Slice a model reply into a mapping of every label to its trimmed body.

    Duplicate headings: the last occurrence wins. When no heading is found at
    all, the whole trimmed reply goes to `fallback_label`.
    """
    labels = list(labels or SECTION_LABELS)
    sections = {label: "" for label in labels}

    text = (text or "").replace('\r\n', '\n').replace('\r', '\n')
    if not text.strip():
        return sections

    matches = find_headings(text, labels)
    for i, current in enumerate(matches):
        end = matches[i + 1].start if i + 1 < len(matches) else len(text)
        sections[current.label] = clean_section_body(text[current.body_start:end], labels)

    if not matches and fallback_label in sections:
        sections[fallback_label] = text.strip()

    return sections


def format_sections(sections: Dict[str, str], labels: Optional[Sequence[str]] = None) -> str:
    """Serialize a section map back to `LABEL: body` blocks."""
    labels = list(labels or SECTION_LABELS)
    return '\n'.join(f"{label}: {sections.get(label, '')}" for label in labels)
