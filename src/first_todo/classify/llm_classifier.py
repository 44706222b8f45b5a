# src/first_todo/classify/llm_classifier.py

from __future__ import annotations

import logging
import re

from ..core.ports import LLMClient
from ..todos.todo_models import Category

logger = logging.getLogger(__name__)

CLASSIFIER_SYSTEM_PROMPT = """
You are a to-do item classifier. You do NOT chat with the user.

Input: one to-do item written by the user (any language).

Task: answer with exactly one label from this list:
- shopping   (buying things, groceries, errands at a store)
- meeting    (appointments, calls, meetings, scheduled events with people)
- workout    (exercise, sports, training, running, gym)
- others     (anything else)

Rules:
- Reply with the label only, lowercase, no punctuation, no explanation.
""".strip()

_WORD_RE = re.compile(r"[^\W\d_]+", re.UNICODE)

MAX_TEXT_CHARS = 500


class LLMCategoryClassifier:
    """
    Category classifier backed by a chat LLM.

    The model is asked for a single label; the first recognisable label in the
    reply wins. Any error yields None so task creation is never blocked.
    """

    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    def classify(self, text: str) -> str | None:
        clean = (text or "").strip()
        if not clean:
            return None
        if len(clean) > MAX_TEXT_CHARS:
            clean = clean[:MAX_TEXT_CHARS]

        raw = ""
        try:
            for piece in self._llm.stream_chat([{"role": "user", "content": clean}], CLASSIFIER_SYSTEM_PROMPT):
                raw += piece
        except Exception:
            logger.exception("LLM classification failed.")
            return None

        label = extract_label(raw)
        logger.debug("LLM classified text_len=%d raw=%r -> %s", len(clean), raw[:40], label)
        return label


def extract_label(reply: str) -> str | None:
    """First word of the reply that maps onto a known category."""
    for word in _WORD_RE.findall(reply or ""):
        category = Category.parse(word)
        if category is not None:
            return category.value
    return None
