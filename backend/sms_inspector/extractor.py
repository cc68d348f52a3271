"""
Heuristic extraction of confirmation codes and links from SMS bodies.

The patterns are deliberately loose: the first numeric run that looks like a
code is taken, even when the message also carries a phone number or amount.
"""

import re

from sms_inspector.models import ExtractedInfo

# 4-8 consecutive digits, or a 123-456 pair
CODE_PATTERN = re.compile(r"\b(\d{4,8}|\d{3}-\d{3})\b", re.ASCII)

LINK_PATTERN = re.compile(r"https?://[^\s\"']+")


def extract_confirmation_code(message: str):
    match = CODE_PATTERN.search(message)
    if match is None:
        return None
    return match.group(1).replace("-", "")


def extract_link(message: str):
    match = LINK_PATTERN.search(message)
    return match.group(0) if match else None


def extract_info(message: str) -> ExtractedInfo:
    """
    Extract the first confirmation code and the first link from a message.

    Args:
        message: Raw SMS body

    Returns:
        ExtractedInfo with either field left as None when nothing matched
    """
    if not message:
        return ExtractedInfo()
    return ExtractedInfo(
        confirmation_code=extract_confirmation_code(message),
        link=extract_link(message),
    )
