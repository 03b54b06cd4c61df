"""Turns extracted section bodies into display-ready content.

Each label has an expected shape (prose, bullet list, tools + numbered
steps). The helpers here coerce whatever the model produced into that shape
and substitute fixed defaults when the result would be empty or too sparse.
Nothing in this module raises for odd input, and every string it returns is
HTML-escaped so the front end can embed it directly.
"""
import html
import re
from typing import Dict, List, Optional, Union

from prompts import (
    SECTION_LABELS,
    PROSE_LABELS,
    STEP_LABELS,
    LIST_LABELS,
    DISPLAY_ORDER,
    NOT_PROVIDED,
    DEFAULT_TOOLS,
    MIN_LIST_ENTRIES,
    LIST_DEFAULTS,
    STATUS_ICONS
)

NormalizedBody = Union[str, List[str], Dict[str, List[str]]]

# --- REGEX PATTERNS ---
REGEX_PATTERNS = {
    'bullet': re.compile(r'^\s*(?:[-*•‣▪]|–)\s+'),
    'step_number': re.compile(r'^\s*(?:step\s*)?\d+\s*[\.\):]\s*', re.IGNORECASE),
    'first_step': re.compile(r'^\s*(?:step\s*)?1\s*[\.\):]', re.IGNORECASE | re.MULTILINE),
    'tools_heading': re.compile(r'^\s*(?:\*\*|#+\s*)?tools(?:\s+needed|\s+required)?\s*(?:\*\*)?\s*:?\s*(?:\*\*)?\s*', re.IGNORECASE),
    'steps_heading': re.compile(r'^\s*(?:\*\*|#+\s*)?(?:steps|instructions|procedure)\s*(?:\*\*)?\s*:?\s*(?:\*\*)?\s*', re.IGNORECASE),
    'list_split': re.compile(r'\n+'),
    'tool_split': re.compile(r'\s*,\s*'),
}

_FAIL_GLYPHS = ("❌", "✗", "✖")
_NEGATIVE_PHRASES = ("not compatible", "incompatible", "does not fit", "doesn't fit", "won't fit", "will not fit")


def escape(text: str) -> str:
    return html.escape(text or "", quote=True)


def _strip_bullet(line: str) -> str:
    return REGEX_PATTERNS['bullet'].sub('', line).strip()


def _is_heading_line(pattern_name: str, line: str) -> Optional[str]:
    """Return the inline remainder if `line` is a tools/steps heading, else None.

    The heading has to be the label itself ("Tools:", "**Steps**"), not a
    sentence that happens to start with the word ("Tools are in the trunk").
    """
    m = REGEX_PATTERNS[pattern_name].match(line)
    if not m:
        return None
    rest = line[m.end():]
    matched = line[:m.end()]
    if rest and ':' not in matched:
        return None
    return rest.strip()


def _is_echo(entry: str, label: str) -> bool:
    lowered = entry.strip().strip('*').strip().lower()
    name = label.lower()
    return lowered in (name, f"{name}:")


def split_list_items(body: Optional[str], label: str = "") -> List[str]:
    """Split a bulleted/line-separated body into trimmed entries."""
    items = []
    for line in REGEX_PATTERNS['list_split'].split(body or ""):
        entry = _strip_bullet(line)
        if not entry or (label and _is_echo(entry, label)):
            continue
        items.append(entry)
    return items


def _split_tools(lines: List[str]) -> List[str]:
    tools = []
    for line in lines:
        for part in REGEX_PATTERNS['tool_split'].split(_strip_bullet(line)):
            part = part.strip().rstrip('.')
            if part and not _is_echo(part, "tools"):
                tools.append(part)
    return tools


def _clean_steps(lines: List[str]) -> List[str]:
    joined = "\n".join(lines)
    numbered = bool(REGEX_PATTERNS['first_step'].search(joined))
    steps = []
    for line in lines:
        line = _strip_bullet(line)
        if numbered:
            line = REGEX_PATTERNS['step_number'].sub('', line, count=1).strip()
        if line and not _is_echo(line, "steps"):
            steps.append(line)
    return steps


def split_how_to(body: Optional[str]) -> Dict[str, List[str]]:
    """Split a HOW TO body into its tool list and ordered step list."""
    lines = [l.strip() for l in (body or "").split('\n') if l.strip()]

    tool_lines, step_lines = [], []
    saw_tools = saw_steps = False
    for line in lines:
        steps_rest = _is_heading_line('steps_heading', line)
        if steps_rest is not None:
            saw_steps = True
            if steps_rest:
                step_lines.append(steps_rest)
            continue
        tools_rest = _is_heading_line('tools_heading', line)
        if tools_rest is not None and not saw_steps:
            saw_tools = True
            if tools_rest:
                tool_lines.append(tools_rest)
            continue
        if saw_steps:
            step_lines.append(line)
        elif saw_tools:
            # No steps heading yet: numbered lines already belong to the steps.
            if REGEX_PATTERNS['step_number'].match(line):
                step_lines.append(line)
            else:
                tool_lines.append(line)
        else:
            tool_lines.append(line)

    if not saw_tools and not saw_steps:
        # Plain body, every line is a step.
        step_lines, tool_lines = tool_lines, []
    elif not saw_steps and step_lines:
        # Numbered lines after a tools block; anything after the first one is a step too.
        first = lines.index(step_lines[0])
        step_lines = [l for l in lines[first:] if _is_heading_line('tools_heading', l) is None]
        tool_lines = [l for l in tool_lines if l not in step_lines]

    tools = _split_tools(tool_lines) or list(DEFAULT_TOOLS)
    return {
        "tools": [escape(t) for t in tools],
        "steps": [escape(s) for s in _clean_steps(step_lines)],
    }


def normalize_list(label: str, body: Optional[str]) -> List[str]:
    if label == "TOOLS":
        items = _split_tools(split_list_items(body, label))
    else:
        items = split_list_items(body, label)
    minimum = MIN_LIST_ENTRIES.get(label, 1)
    if len(items) < minimum:
        items = list(LIST_DEFAULTS.get(label, []))
    return [escape(item) for item in items]


def normalize_prose(body: Optional[str]) -> str:
    body = (body or "").strip()
    return escape(body) if body else NOT_PROVIDED


def normalize_section(label: str, body: Optional[str]) -> NormalizedBody:
    label = (label or "").upper()
    if not isinstance(body, str):
        body = "" if body is None else str(body)
    if label in PROSE_LABELS:
        return normalize_prose(body)
    if label in STEP_LABELS:
        return split_how_to(body)
    if label in LIST_LABELS:
        return normalize_list(label, body)
    # Unknown labels render as prose too.
    return normalize_prose(body)


def classify_status(text: Optional[str]) -> str:
    """Map a RESULT/COMPATIBILITY line to ok, warn or fail.

    Affirmative markers win over caution, caution over negative. A negated
    "compatible" ("not compatible", "incompatible") is never read as
    affirmative. Anything else is "warn".
    """
    lower = (text or "").lower()
    negated = any(p in lower for p in _NEGATIVE_PHRASES)
    if "✅" in lower or "✔" in lower: return "ok"
    if not negated and ("compatible" in lower or re.search(r'\bfits\b', lower)): return "ok"
    if "⚠" in lower or "check" in lower or "verify" in lower: return "warn"
    if negated or any(g in lower for g in _FAIL_GLYPHS): return "fail"
    if re.search(r'\bnot\b', lower): return "fail"
    return "warn"


def build_banner(sections: Dict[str, str]) -> Optional[Dict[str, str]]:
    result = (sections.get("RESULT") or "").strip()
    compat = (sections.get("COMPATIBILITY") or "").strip()
    headline = result or compat
    if not headline:
        return None
    status = classify_status(headline)
    description = compat if result and compat else headline
    return {
        "status": status,
        "icon": STATUS_ICONS[status],
        "headline": escape(headline),
        "description": escape(description),
    }


def build_cards(sections: Dict[str, str]) -> List[Dict]:
    how_to = split_how_to(sections.get("HOW TO", ""))
    cards = []
    for title in DISPLAY_ORDER:
        if title == "TOOLS":
            cards.append({"title": title, "kind": "list", "content": how_to["tools"]})
        elif title == "STEPS":
            if how_to["steps"]:
                cards.append({"title": title, "kind": "steps", "content": how_to["steps"]})
        elif title in LIST_LABELS:
            cards.append({"title": title, "kind": "list", "content": normalize_list(title, sections.get(title, ""))})
        else:
            cards.append({"title": title, "kind": "text", "content": normalize_prose(sections.get(title, ""))})
    return cards


def render_sections(sections: Dict[str, str]) -> Dict:
    sections = sections or {label: "" for label in SECTION_LABELS}
    return {
        "banner": build_banner(sections),
        "cards": build_cards(sections),
    }
