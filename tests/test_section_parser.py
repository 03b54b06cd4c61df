from prompts import SECTION_LABELS
from section_parser import (
    clean_output,
    clean_section_body,
    extract_sections,
    find_headings,
    format_sections,
    sanitize_input,
)


FULL_REPLY = """RESULT: ✅ Compatible - matches the 2015 Civic 1.8L
COMPATIBILITY: Part number 15400-PLM-A02 fits this engine.

OVERVIEW: Oil filter, OEM markings visible.
SKILL LEVEL REQUIRED: Easy - basic hand tools.
HOW TO:
Tools:
- Filter wrench
- Drain pan
Steps:
1. Drain the oil
2. Remove old filter
TIPS:
- Lube the gasket
- Hand tighten only
RELATED PRODUCTS:
- 0W-20 engine oil
"""


def test_result_and_overview_on_separate_lines():
    sections = extract_sections("RESULT: ✅ Compatible\nOVERVIEW: Oil filter, OEM markings visible.")
    assert sections["RESULT"] == "✅ Compatible"
    assert sections["OVERVIEW"] == "Oil filter, OEM markings visible."
    for label in SECTION_LABELS:
        if label not in ("RESULT", "OVERVIEW"):
            assert sections[label] == ""


def test_every_label_is_present_and_a_string():
    sections = extract_sections(FULL_REPLY)
    assert list(sections.keys()) == SECTION_LABELS
    assert all(isinstance(v, str) for v in sections.values())


def test_full_reply_is_sliced_per_heading():
    sections = extract_sections(FULL_REPLY)
    assert sections["RESULT"] == "✅ Compatible - matches the 2015 Civic 1.8L"
    assert sections["COMPATIBILITY"] == "Part number 15400-PLM-A02 fits this engine."
    assert sections["SKILL LEVEL REQUIRED"] == "Easy - basic hand tools."
    assert sections["HOW TO"] == (
        "Tools:\n- Filter wrench\n- Drain pan\nSteps:\n1. Drain the oil\n2. Remove old filter"
    )
    assert sections["TIPS"] == "- Lube the gasket\n- Hand tighten only"
    assert sections["RELATED PRODUCTS"] == "- 0W-20 engine oil"


def test_bodies_have_no_surrounding_whitespace_or_blank_lines():
    sections = extract_sections("RESULT:   ok  \n\n\n   \nTIPS:\n\n  - a  \n\n  - b\n\n")
    assert sections["RESULT"] == "ok"
    assert sections["TIPS"] == "- a\n- b"


def test_no_headings_falls_back_to_overview():
    text = "  This looks like a brake pad set for a small hatchback.\nNo markings visible.  "
    sections = extract_sections(text)
    assert sections["OVERVIEW"] == text.strip()
    assert all(v == "" for k, v in sections.items() if k != "OVERVIEW")


def test_empty_and_whitespace_text_yield_empty_sections():
    for text in ("", "   \n\t  ", None):
        sections = extract_sections(text)
        assert list(sections.keys()) == SECTION_LABELS
        assert all(v == "" for v in sections.values())


def test_headings_found_but_empty_do_not_trigger_fallback():
    sections = extract_sections("RESULT:\nTIPS:")
    assert all(v == "" for v in sections.values())


def test_heading_at_end_of_text_is_empty():
    sections = extract_sections("RESULT: ok\nTIPS:")
    assert sections["RESULT"] == "ok"
    assert sections["TIPS"] == ""


def test_empty_heading_followed_by_indented_heading():
    sections = extract_sections("RESULT:\n  COMPATIBILITY: Fits the R18 engine")
    assert sections["RESULT"] == ""
    assert sections["COMPATIBILITY"] == "Fits the R18 engine"

    sections = extract_sections("## Result\n   TIPS:\n   - a\n   - b")
    assert sections["RESULT"] == ""
    assert sections["TIPS"] == "- a\n- b"


def test_matching_is_case_insensitive_and_tolerates_markdown():
    text = "## Result\n✅ Compatible\n**Overview:** Oil filter\nskill  level required - Easy"
    sections = extract_sections(text)
    assert sections["RESULT"] == "✅ Compatible"
    assert sections["OVERVIEW"] == "Oil filter"
    assert sections["SKILL LEVEL REQUIRED"] == "Easy"


def test_hyphen_separator():
    sections = extract_sections("Tips - check the seal\nRelated Products - new gasket")
    assert sections["TIPS"] == "check the seal"
    assert sections["RELATED PRODUCTS"] == "new gasket"


def test_words_starting_with_a_label_are_not_headings():
    sections = extract_sections("OVERVIEW: Filter\nResults may vary by trim.")
    assert sections["OVERVIEW"] == "Filter\nResults may vary by trim."
    assert sections["RESULT"] == ""


def test_mid_line_label_is_not_a_heading():
    sections = extract_sections("OVERVIEW: see the TIPS: below")
    assert sections["OVERVIEW"] == "see the TIPS: below"
    assert sections["TIPS"] == ""


def test_duplicate_heading_last_occurrence_wins():
    sections = extract_sections("TIPS: first\nOVERVIEW: x\nTIPS: second")
    assert sections["TIPS"] == "second"
    assert sections["OVERVIEW"] == "x"


def test_repeated_heading_inside_body_is_stripped():
    sections = extract_sections("OVERVIEW: OVERVIEW: Oil filter\nCanister type")
    assert sections["OVERVIEW"] == "Oil filter\nCanister type"


def test_longer_label_is_not_claimed_by_its_prefix():
    labels = ["TIPS", "TIPS SUMMARY"]
    sections = extract_sections("TIPS SUMMARY: short\nTIPS: long one", labels)
    assert sections == {"TIPS": "long one", "TIPS SUMMARY": "short"}


def test_windows_line_endings():
    sections = extract_sections("RESULT: ok\r\nTIPS: a\r\n")
    assert sections["RESULT"] == "ok"
    assert sections["TIPS"] == "a"


def test_custom_labels_and_fallback():
    sections = extract_sections("nothing here", ["A", "B"], fallback_label="B")
    assert sections == {"A": "", "B": "nothing here"}


def test_find_headings_in_order_of_occurrence():
    matches = find_headings("TIPS: a\nRESULT: b")
    assert [m.label for m in matches] == ["TIPS", "RESULT"]
    assert matches[0].start == 0
    assert matches[1].start == len("TIPS: a\n")
    assert matches[0].body_start == len("TIPS: ")


def test_clean_section_body_drops_heading_prefix_and_blanks():
    assert clean_section_body("  TIPS: keep torque low \n\n - b ") == "keep torque low\n- b"
    assert clean_section_body("") == ""


def test_round_trip_through_formatted_sections():
    sections = extract_sections(FULL_REPLY)
    again = extract_sections(format_sections(sections))
    assert again == sections


def test_clean_output_strips_code_fences():
    assert clean_output("```text\nRESULT: ok\n\n\n\nTIPS: a\n```") == "RESULT: ok\n\nTIPS: a"
    assert clean_output("") == ""


def test_sanitize_input():
    assert sanitize_input("Civic `Si`") == "Civic Si"
    assert sanitize_input("a" * 20, max_length=10) == "a" * 10 + "..."
    assert sanitize_input(None) == ""
