# core/answers.py
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from models import utcnow
from schemas.attempts import AnswerMap, AnswerRecord, AnswerUpdate


def merge_answers(
    existing: AnswerMap,
    incoming: Iterable[AnswerUpdate],
    now: Optional[datetime] = None,
) -> AnswerMap:
    """
    Fold partial answer updates into an attempt's answer map.

    Last write wins per field, not per record: only fields present in an
    update's payload are written. The input map is left untouched.

      - a record is created the first time a question is referenced, even by a
        bare review mark;
      - selected_answer present -> overwritten, answered_at stamped with the
        update's own answered_at if it carries one, else ``now``;
        an explicit null clears the selection and keeps answered_at;
      - marked_for_review present -> overwritten on its own.
    """
    now = now or utcnow()
    merged: AnswerMap = dict(existing)

    for upd in incoming:
        sent = upd.model_fields_set
        cur = merged.get(upd.question_id) or AnswerRecord(question_id=upd.question_id)
        changes = {}

        if "selected_answer" in sent:
            changes["selected_answer"] = upd.selected_answer
            if upd.selected_answer is not None:
                changes["answered_at"] = upd.answered_at or now

        if "marked_for_review" in sent and upd.marked_for_review is not None:
            changes["marked_for_review"] = upd.marked_for_review

        merged[upd.question_id] = cur.model_copy(update=changes)

    return merged
