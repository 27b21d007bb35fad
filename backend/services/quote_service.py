"""
quote_service.py — Check-in quotes
Default quotes plus the user's custom ones, minus hidden ones. Picks by context
after a submission, or a stable quote of the day.
"""

import random

from domain import Quote, UserSettings

DEFAULT_QUOTES = [
    # Prompts — reflective questions for the start of a check-in
    Quote(id="q-p1", text="Did I cast votes today for the person I want to be?", category="prompt", is_default=True),
    Quote(id="q-p2", text="What is the smallest action that keeps the streak alive?", category="prompt", is_default=True),
    Quote(id="q-p3", text="If today repeats for 365 days, where do I end up?", category="prompt", is_default=True),
    # Rules
    Quote(id="q-r1", text="I don't negotiate with the plan. I execute it.", category="rule", is_default=True),
    Quote(id="q-r2", text="This is automatic. No debate.", category="rule", is_default=True),
    Quote(id="q-r3", text="The system protects me from my moods.", category="rule", is_default=True),
    # Liners — short ones for wins
    Quote(id="q-l1", text="Small actions. Ruthless consistency.", category="liner", is_default=True),
    Quote(id="q-l2", text="Discipline first. Motivation follows.", category="liner", is_default=True),
    Quote(id="q-l3", text="Progress beats perfection, every time.", category="liner", is_default=True),
    Quote(id="q-l4", text="I only need to start. Momentum will carry me.", category="liner", is_default=True),
    # Strong thoughts — after a miss
    Quote(id="q-s1", text="Bad days still count if the minimum is met.", category="strong_thought", is_default=True),
    Quote(id="q-s2", text="One small action keeps the identity alive.", category="strong_thought", is_default=True),
    Quote(id="q-s3", text="I can do hard things even when I don't feel like it.", category="strong_thought", is_default=True),
    Quote(id="q-s4", text="If I do the minimum, I protect the streak and protect the future.", category="strong_thought", is_default=True),
]

CONTEXT_CATEGORIES = {
    "morning": {"prompt"},
    "streak_milestone": {"liner", "strong_thought"},
    "after_miss": {"strong_thought"},
}


class QuoteService:
    @staticmethod
    def active_quotes(settings: UserSettings | None = None) -> list[Quote]:
        if settings is None:
            return list(DEFAULT_QUOTES)
        hidden = set(settings.hidden_quote_ids)
        return [q for q in DEFAULT_QUOTES if q.id not in hidden] + list(settings.custom_quotes)

    @staticmethod
    def contextual(context: str, settings: UserSettings | None = None, rng: random.Random | None = None) -> Quote:
        quotes = QuoteService.active_quotes(settings)
        categories = CONTEXT_CATEGORIES.get(context)
        pool = [q for q in quotes if q.category in categories] if categories else quotes
        if not pool:
            pool = quotes
        if not pool:
            return DEFAULT_QUOTES[0]
        return (rng or random).choice(pool)

    @staticmethod
    def quote_of_the_day(date: str, settings: UserSettings | None = None) -> Quote:
        """Same quote all day: 32-bit string hash of the date picks the index."""
        quotes = QuoteService.active_quotes(settings)
        if not quotes:
            return DEFAULT_QUOTES[0]
        h = 0
        for ch in date:
            h = (h * 31 + ord(ch)) & 0xFFFFFFFF
        if h >= 0x80000000:
            h -= 0x100000000
        return quotes[abs(h) % len(quotes)]
