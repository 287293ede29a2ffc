# config/tag_config.py

import re
from enum import Enum


class SystemTag(str, Enum):
    finalist                 = "FINALIST"
    alumni                   = "ALUMNI"
    pending_first_attendance = "PENDING_FIRST_ATTENDANCE"
    family_head              = "FAMILY_HEAD"
    check_in_volunteer       = "CHECK_IN_VOLUNTEER"


# name -> (description, color)
SYSTEM_TAG_DEFINITIONS = {
    SystemTag.finalist:                 ("Member in the final year of their course", "#f59e0b"),
    SystemTag.alumni:                   ("Member who has completed their course", "#8b5cf6"),
    SystemTag.pending_first_attendance: ("Member awaiting their first event attendance", "#10b981"),
    SystemTag.family_head:              ("Family Head", "#22c55e"),
    SystemTag.check_in_volunteer:       ("Temporary check-in permission for an event", "#0ea5e9"),
}

# Suffixes for tags generated from a parent entity name
LEADER_SUFFIX = "LEADER"
MEMBER_SUFFIX = "MEMBER"
HEAD_SUFFIX   = "HEAD"

DEFAULT_CUSTOM_TAG_COLOR = "#6366f1"
SYSTEM_ACTOR = "SYSTEM"

_NON_ALNUM = re.compile(r"[^A-Z0-9]+")


def generate_tag_name(entity_name: str, suffix: str) -> str:
    """e.g. ("Worship Team", LEADER) -> WORSHIP_TEAM_LEADER"""
    base = _NON_ALNUM.sub("_", entity_name.upper()).strip("_")
    return f"{base}_{suffix}"
