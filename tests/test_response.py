"""Tests for structured reply rendering."""

from __future__ import annotations

import json

from assistants_client.remote.response import format_reply, parse_structured_reply


def test_plain_text_passes_through() -> None:
    assert format_reply("Just some advice.") == "Just some advice."


def test_json_without_message_passes_through() -> None:
    raw = json.dumps({"issues": []})
    assert parse_structured_reply(raw) is None
    assert format_reply(raw) == raw
    assert format_reply("[1, 2]") == "[1, 2]"


def test_full_structured_reply() -> None:
    raw = json.dumps({
        "message": "Two problems found.",
        "review_stage": "final",
        "accessibility_status": {"overall_rating": "needs_work", "summary": "Contrast issues."},
        "issues": [
            {
                "severity": "high",
                "category": "color_contrast",
                "wcag_criterion": "1.4.3",
                "location": "Header",
                "description": "Low contrast text.",
                "recommendation": "Darken the text.",
                "code_example": "color: #222;",
            },
            {"description": "Missing label."},
        ],
        "emphasis_points": ["Test with a screen reader"],
        "context": {"wcag_level": "AA", "platform": "not_specified"},
        "waiting_for": "user_feedback",
    })

    text = format_reply(raw)

    assert text.startswith("Two problems found.\n\n## Accessibility Status\n")
    assert "**Overall Rating:** needs work" in text
    assert "**Summary:** Contrast issues." in text
    assert "\n## Issues Found\n" in text
    assert "\n### [HIGH] color contrast\n" in text
    assert "**WCAG Criterion:** 1.4.3" in text
    assert "**Code Example:**\n```\ncolor: #222;\n```" in text
    assert "\n###  General\n**Description:** Missing label." in text
    assert "\n## Key Points for Development\n- Test with a screen reader" in text
    assert "*Review Context: WCAG Level: AA*" in text
    assert "Platform" not in text
    assert text.endswith("\n---\n*Waiting for: user feedback*")


def test_waiting_for_nothing_is_omitted() -> None:
    raw = json.dumps({"message": "Done.", "waiting_for": "nothing", "issues": []})
    assert format_reply(raw) == "Done."


def test_minimal_issue_reply() -> None:
    raw = '{"message":"hi","issues":[{"severity":"major","category":"x","description":"d"}]}'

    text = format_reply(raw)

    assert "hi" in text
    assert "MAJOR" in text
    assert "### [MAJOR] x" in text
    assert "**Description:** d" in text


def test_non_json_text_is_unchanged() -> None:
    assert format_reply("hello world") == "hello world"
