"""Domain enumerations for the Guildhall application.

Enums represent fixed sets of domain values (e.g. automation status,
trigger type, action type).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings.

        Returns:
            List of enum value strings (e.g. for validation or serialization).
        """
        return [member.value for member in cls]


class TriggerType(_ValuesMixin, str, Enum):
    """Category of event or timing condition under which an automation fires.

    Every type except SCHEDULED is event-based and is fed by the event
    dispatcher; SCHEDULED automations are picked up by the scheduler's
    due-query.
    """

    MEMBER_CREATED = "member_created"
    MEMBER_UPDATED = "member_updated"
    TIER_UPGRADE = "tier_upgrade"
    DONATION_RECEIVED = "donation_received"
    EVENT_REGISTRATION = "event_registration"
    EVENT_CHECK_IN = "event_check_in"
    EVENT_REMINDER = "event_reminder"
    POST_EVENT_SURVEY = "post_event_survey"
    SCHEDULED = "scheduled"


class AutomationStatus(_ValuesMixin, str, Enum):
    """Automation lifecycle status. Only ACTIVE automations run."""

    ACTIVE = "active"
    PAUSED = "paused"
    DISABLED = "disabled"


class ActionType(_ValuesMixin, str, Enum):
    """Known action types for an automation step."""

    SEND_EMAIL = "send_email"
    CREATE_TASK = "create_task"
    UPDATE_MEMBER_FIELD = "update_member_field"
    WAIT = "wait"
    CALL_EXTERNAL_WORKFLOW = "call_external_workflow"


class MemberTier(_ValuesMixin, str, Enum):
    """Membership tier."""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class MemberStatus(_ValuesMixin, str, Enum):
    """Membership status."""

    ACTIVE = "active"
    PENDING = "pending"
    LAPSED = "lapsed"
    CANCELLED = "cancelled"
