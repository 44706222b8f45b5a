# src/first_todo/classify/keyword_classifier.py

"""
Offline keyword classifier.

Used when no LLM is configured (demos, tests, local runs). Patterns are
checked in category reference order; the first match wins.
"""

from __future__ import annotations

import re

from ..todos.todo_models import Category

KEYWORD_PATTERNS: dict[Category, list[str]] = {
    Category.SHOPPING: [
        r"\b(buy|purchase|shop(ping)?|groceries|grocery|order|pick up|supermarket|store|mall)\b",
        r"\b(milk|bread|eggs|coffee beans|detergent)\b",
        r"(쇼핑|사기|구매|장보기|마트|주문)",
    ],
    Category.MEETING: [
        r"\b(meet(ing)?|call|appointment|interview|sync|standup|stand-up|conference|lunch with|dinner with)\b",
        r"\b(zoom|teams|1:1|one-on-one)\b",
        r"(회의|미팅|약속|면접|통화)",
    ],
    Category.WORKOUT: [
        r"\b(workout|work out|gym|run(ning)?|jog(ging)?|yoga|swim(ming)?|exercise|training|pilates|lift(ing)?|push-?ups?)\b",
        r"(운동|헬스|달리기|조깅|요가|수영|필라테스)",
    ],
}

_COMPILED: list[tuple[Category, list[re.Pattern[str]]]] = [
    (category, [re.compile(p, re.IGNORECASE) for p in patterns])
    for category, patterns in KEYWORD_PATTERNS.items()
]


class KeywordCategoryClassifier:
    def classify(self, text: str) -> str | None:
        clean = (text or "").strip()
        if not clean:
            return None
        for category, patterns in _COMPILED:
            for pattern in patterns:
                if pattern.search(clean):
                    return category.value
        return None
