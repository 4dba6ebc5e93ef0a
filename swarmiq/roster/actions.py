"""
Roster Actions - Closed action set, typed results and handlers

Every ActionKind except UNKNOWN has exactly one handler; the table is
checked at import so a new action kind can't ship without one. Handlers
are deterministic keyword rules over the e-mail; the clock is injected
so scheduled dates are testable.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Annotated, Callable, Dict, List, Literal, Tuple, Union
from pydantic import BaseModel, Field

from swarmiq.core.config import RosterConfig
from swarmiq.core.exceptions import InvalidConfiguration
from swarmiq.core.models import ActionKind, Email, Impact


# =========================================================
# RESULTS
# =========================================================

class CategorizeResult(BaseModel):
    kind: Literal["categorize"] = "categorize"
    success: bool = True
    category: str


class PrioritizeResult(BaseModel):
    kind: Literal["prioritize"] = "prioritize"
    success: bool = True
    priority: float = Field(..., ge=0.0, le=10.0)


class RespondResult(BaseModel):
    kind: Literal["respond"] = "respond"
    success: bool = True
    response: str


class ScheduleResult(BaseModel):
    kind: Literal["schedule"] = "schedule"
    success: bool = True
    scheduled_time: datetime


class ExtractResult(BaseModel):
    kind: Literal["extract"] = "extract"
    success: bool = True
    action_items: List[str]


class FollowUpResult(BaseModel):
    kind: Literal["followup"] = "followup"
    success: bool = True
    follow_up_date: datetime


class FilterResult(BaseModel):
    kind: Literal["filter"] = "filter"
    success: bool = True
    filtered: bool


class DelegateResult(BaseModel):
    kind: Literal["delegate"] = "delegate"
    success: bool = True
    delegated_to: str


class RejectedResult(BaseModel):
    kind: Literal["rejected"] = "rejected"
    success: bool = False
    action: str = ""
    reason: str


class FailedResult(BaseModel):
    kind: Literal["failed"] = "failed"
    success: bool = False
    action: str = ""
    error: str


ActionResult = Annotated[
    Union[
        CategorizeResult,
        PrioritizeResult,
        RespondResult,
        ScheduleResult,
        ExtractResult,
        FollowUpResult,
        FilterResult,
        DelegateResult,
        RejectedResult,
        FailedResult,
    ],
    Field(discriminator="kind"),
]


# =========================================================
# SIGNALS
# =========================================================

SPAM_MARKERS = (
    "lottery", "you have won", "you've won", "claim your prize", "free money",
    "wire transfer", "act now", "100% free", "risk-free", "click here",
    "limited time offer", "viagra", "crypto giveaway",
)
URGENT_MARKERS = ("urgent", "asap", "immediately", "critical", "emergency", "right away")
DEADLINE_MARKERS = ("deadline", "due ", "by tomorrow", "by today", "end of day", "eod", "by friday", "by monday")
NEWSLETTER_MARKERS = ("newsletter", "unsubscribe", "digest", "weekly update", "monthly update", "view in browser")
BULK_SENDERS = ("noreply", "no-reply", "newsletter", "mailer", "notifications")
SOCIAL_MARKERS = (
    "linkedin", "facebook", "twitter", "instagram", "friend request",
    "invited you", "followed you", "new connection", "birthday",
)
WORK_MARKERS = (
    "meeting", "project", "report", "client", "proposal", "invoice",
    "review", "quarterly", "budget", "team", "contract", "roadmap",
)
MEETING_MARKERS = ("meeting", "schedule", "calendar", "availability", "available", "call", "slot", "reschedule")
FOLLOWUP_MARKERS = ("follow up", "follow-up", "following up", "reminder", "checking in", "any update", "circling back")
DELEGATE_MARKERS = ("forward to", "loop in", "who can", "someone on your team", "point of contact", "right person")
REQUEST_MARKERS = (
    "please", "could you", "can you", "would you", "need to", "needs to",
    "make sure", "let me know", "action item", "todo", "to-do",
)
IMPERATIVE_VERBS = (
    "send", "review", "schedule", "prepare", "update", "call", "confirm",
    "submit", "share", "check", "sign", "book", "approve",
)

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+|\n+")


def _lower(email: Email) -> str:
    return email.text.lower()


def _has_any(text: str, markers) -> bool:
    return any(marker in text for marker in markers)


def is_spam(email: Email) -> bool:
    return _has_any(_lower(email), SPAM_MARKERS)


def is_urgent(email: Email) -> bool:
    return _has_any(_lower(email), URGENT_MARKERS)


def is_bulk(email: Email) -> bool:
    return _has_any(_lower(email), NEWSLETTER_MARKERS) or _has_any(email.sender.lower(), BULK_SENDERS)


def extract_action_items(body: str) -> List[str]:
    """Sentences that ask for something to be done."""
    items = []
    for sentence in _SENTENCE_SPLIT.split(body or ""):
        sentence = sentence.strip()
        if not sentence:
            continue
        lowered = sentence.lower()
        first_word = lowered.split()[0].strip(",:;-") if lowered.split() else ""
        if _has_any(lowered, REQUEST_MARKERS) or first_word in IMPERATIVE_VERBS:
            items.append(sentence)
    return items


def categorize_email(email: Email) -> str:
    # First match wins: spam > urgent > newsletter > social > work > personal
    text = _lower(email)
    if is_spam(email):
        return "spam"
    if is_urgent(email):
        return "urgent"
    if is_bulk(email):
        return "newsletter"
    if _has_any(text, SOCIAL_MARKERS):
        return "social"
    if _has_any(text, WORK_MARKERS):
        return "work"
    return "personal"


def priority_score(email: Email) -> float:
    text = _lower(email)
    score = 3.0
    if is_urgent(email):
        score += 4.0
    if _has_any(text, DEADLINE_MARKERS):
        score += 2.0
    if email.has_attachment:
        score += 1.0
    if "?" in email.body:
        score += 1.0
    if is_bulk(email):
        score -= 2.0
    if is_spam(email):
        score -= 3.0
    return min(10.0, max(0.0, score))


# =========================================================
# HANDLERS
# =========================================================

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ActionContext:
    config: RosterConfig = field(default_factory=RosterConfig)
    clock: Callable[[], datetime] = utcnow


def _categorize(email: Email, ctx: ActionContext) -> CategorizeResult:
    return CategorizeResult(category=categorize_email(email))


def _prioritize(email: Email, ctx: ActionContext) -> PrioritizeResult:
    return PrioritizeResult(priority=priority_score(email))


def _respond(email: Email, ctx: ActionContext) -> RespondResult:
    subject = email.subject.strip()
    if subject:
        response = f'Thank you for your email regarding "{subject}". I\'ll get back to you soon.'
    else:
        response = "Thank you for your email. I'll get back to you soon."
    return RespondResult(response=response)


def _schedule(email: Email, ctx: ActionContext) -> ScheduleResult:
    return ScheduleResult(scheduled_time=ctx.clock() + timedelta(days=ctx.config.schedule_offset_days))


def _extract(email: Email, ctx: ActionContext) -> ExtractResult:
    return ExtractResult(action_items=extract_action_items(email.body))


def _followup(email: Email, ctx: ActionContext) -> FollowUpResult:
    return FollowUpResult(follow_up_date=ctx.clock() + timedelta(days=ctx.config.followup_offset_days))


def _filter(email: Email, ctx: ActionContext) -> FilterResult:
    return FilterResult(filtered=is_spam(email))


def _delegate(email: Email, ctx: ActionContext) -> DelegateResult:
    return DelegateResult(delegated_to=ctx.config.delegate_address)


HANDLERS: Dict[ActionKind, Callable[[Email, ActionContext], BaseModel]] = {
    ActionKind.CATEGORIZE: _categorize,
    ActionKind.PRIORITIZE: _prioritize,
    ActionKind.RESPOND: _respond,
    ActionKind.SCHEDULE: _schedule,
    ActionKind.EXTRACT: _extract,
    ActionKind.FOLLOWUP: _followup,
    ActionKind.FILTER: _filter,
    ActionKind.DELEGATE: _delegate,
}

_missing = [kind.value for kind in ActionKind.known() if kind not in HANDLERS]
if _missing:
    raise InvalidConfiguration(f"Actions without a handler: {', '.join(_missing)}")


def perform_action(kind: ActionKind, email: Email, ctx: ActionContext) -> ActionResult:
    handler = HANDLERS.get(kind)
    if handler is None:
        return RejectedResult(action=kind.value, reason="Unknown action")
    return handler(email, ctx)


# =========================================================
# HEURISTIC DECISION
# =========================================================

@dataclass
class Suggestion:
    action: ActionKind
    confidence: float
    reasoning: str
    alternatives: List[ActionKind]
    impact: Impact
    scores: Dict[ActionKind, float]


def action_signals(email: Email) -> Dict[ActionKind, Tuple[float, str]]:
    """Raw evidence per action kind, with a short note on where it came from."""
    text = _lower(email)
    signals = {kind: (0.0, "") for kind in ActionKind.known()}

    def add(kind: ActionKind, weight: float, note: str):
        current, notes = signals[kind]
        signals[kind] = (current + weight, f"{notes}, {note}" if notes else note)

    add(ActionKind.CATEGORIZE, 1.0, "every email can be filed")
    if is_spam(email):
        add(ActionKind.FILTER, 4.0, "spam markers")
    if is_bulk(email):
        add(ActionKind.FILTER, 2.0, "bulk mail")
        add(ActionKind.CATEGORIZE, 1.0, "bulk mail")
    if is_urgent(email):
        add(ActionKind.PRIORITIZE, 3.0, "urgency markers")
    if _has_any(text, DEADLINE_MARKERS):
        add(ActionKind.PRIORITIZE, 1.0, "deadline")
    if _has_any(text, MEETING_MARKERS):
        add(ActionKind.SCHEDULE, 3.0, "meeting request")
    if extract_action_items(email.body):
        add(ActionKind.EXTRACT, 2.0, "requests in body")
    if "?" in email.body:
        add(ActionKind.RESPOND, 2.0, "direct question")
    if _has_any(text, FOLLOWUP_MARKERS):
        add(ActionKind.FOLLOWUP, 3.0, "follow-up language")
    if _has_any(text, DELEGATE_MARKERS):
        add(ActionKind.DELEGATE, 3.0, "hand-off language")
    return signals


def suggest_action(
    email: Email,
    capability_confidence: Dict[ActionKind, float],
    specializations: List[str],
    preference_bonus: float = 1.0
) -> Suggestion:
    """
    Pick an action by keyword evidence.

    score(kind) = (evidence + preference) * capability confidence, where
    preference applies to kinds named in the agent's specializations.
    Ties fall to ActionKind declaration order.
    """
    signals = action_signals(email)
    order = ActionKind.known()

    scores = {}
    for kind in order:
        evidence, _ = signals[kind]
        preference = preference_bonus if kind.value in specializations and evidence > 0 else 0.0
        scores[kind] = (evidence + preference) * capability_confidence.get(kind, 0.0)

    ranked = sorted(order, key=lambda k: (-scores[k], order.index(k)))
    best = ranked[0]

    if is_urgent(email):
        impact = Impact.HIGH
    elif is_spam(email) or is_bulk(email):
        impact = Impact.LOW
    else:
        impact = Impact.MEDIUM

    note = signals[best][1] or "no specific signal"
    return Suggestion(
        action=best,
        confidence=capability_confidence.get(best, 0.0),
        reasoning=f"Keyword heuristic chose {best.value} ({note}).",
        alternatives=[k for k in ranked[1:] if scores[k] > 0][:2],
        impact=impact,
        scores=scores,
    )
