#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Assistant reply post-processing

Replies from assistants configured for structured output are JSON objects
with a ``message`` field; those are rendered as readable text. Anything
else is passed through untouched.
"""
import json
from typing import Any, Dict, List, Optional

from ..core.logging import logger

NOT_SPECIFIED = "not_specified"


def _humanize(value: Any) -> str:
    return str(value).replace("_", " ")


def parse_structured_reply(raw: str) -> Optional[Dict[str, Any]]:
    """Return the parsed object if ``raw`` is structured output, else None."""
    try:
        parsed = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    message = parsed.get("message")
    if not isinstance(message, str) or not message:
        return None
    return parsed


def _format_status(status: Dict[str, Any]) -> List[str]:
    parts = ["\n## Accessibility Status"]
    if status.get("overall_rating"):
        parts.append(f"**Overall Rating:** {_humanize(status['overall_rating'])}")
    if status.get("summary"):
        parts.append(f"**Summary:** {status['summary']}")
    return parts


def _format_issue(issue: Dict[str, Any]) -> List[str]:
    severity = f"[{str(issue['severity']).upper()}]" if issue.get("severity") else ""
    category = _humanize(issue["category"]) if issue.get("category") else "General"
    parts = [f"\n### {severity} {category}"]
    if issue.get("wcag_criterion"):
        parts.append(f"**WCAG Criterion:** {issue['wcag_criterion']}")
    if issue.get("location"):
        parts.append(f"**Location:** {issue['location']}")
    if issue.get("description"):
        parts.append(f"**Description:** {issue['description']}")
    if issue.get("recommendation"):
        parts.append(f"**Recommendation:** {issue['recommendation']}")
    code_example = issue.get("code_example")
    if code_example and str(code_example).strip():
        parts.append(f"**Code Example:**\n```\n{code_example}\n```")
    return parts


def format_structured_response(response: Dict[str, Any]) -> str:
    parts: List[str] = []

    if response.get("message"):
        parts.append(str(response["message"]))

    status = response.get("accessibility_status")
    if isinstance(status, dict):
        parts.extend(_format_status(status))

    issues = response.get("issues")
    if isinstance(issues, list) and issues:
        parts.append("\n## Issues Found")
        for issue in issues:
            if isinstance(issue, dict):
                parts.extend(_format_issue(issue))

    points = response.get("emphasis_points")
    if isinstance(points, list) and points:
        parts.append("\n## Key Points for Development")
        for point in points:
            parts.append(f"- {point}")

    context = response.get("context")
    if isinstance(context, dict):
        context_parts = []
        if context.get("wcag_level") and context["wcag_level"] != NOT_SPECIFIED:
            context_parts.append(f"WCAG Level: {context['wcag_level']}")
        if context.get("platform") and context["platform"] != NOT_SPECIFIED:
            context_parts.append(f"Platform: {context['platform']}")
        if context_parts:
            parts.append(f"\n---\n*Review Context: {', '.join(context_parts)}*")

    waiting_for = response.get("waiting_for")
    if waiting_for and waiting_for != "nothing":
        parts.append(f"\n---\n*Waiting for: {_humanize(waiting_for)}*")

    return "\n".join(parts)


def format_reply(raw: str) -> str:
    structured = parse_structured_reply(raw)
    if structured is None:
        logger.debug("Response is not structured JSON, returning raw")
        return raw

    issues = structured.get("issues")
    logger.debug(
        f"Parsed structured response: review_stage={structured.get('review_stage')!r} "
        f"issues={len(issues) if isinstance(issues, list) else 0} "
        f"has_accessibility_status={bool(structured.get('accessibility_status'))}"
    )
    return format_structured_response(structured)
