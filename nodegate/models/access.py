from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class AccessReason(StrEnum):
    LOCALHOST = "localhost"
    OVERLAY_RANGE = "overlay_range"
    KNOWN_PEER = "known_peer"
    INVALID_ADDRESS = "invalid_address"
    NOT_A_MEMBER = "not_a_member"


class MembershipAssertion(BaseModel):
    """Per-request facts about where a caller sits relative to the overlay."""

    model_config = {"frozen": True}

    is_localhost: bool = False
    is_in_overlay_range: bool = False
    is_known_peer: bool = False

    @property
    def is_member(self) -> bool:
        return self.is_localhost or self.is_in_overlay_range or self.is_known_peer


class AccessDecision(BaseModel):
    """Outcome of the access gate for a single request. Never cached."""

    model_config = {"frozen": True}

    allow: bool
    reason: AccessReason
    host: str = ""

    @property
    def message(self) -> str:
        return {
            AccessReason.INVALID_ADDRESS: "invalid address",
            AccessReason.NOT_A_MEMBER: "not a network member",
        }.get(self.reason, self.reason.value)
