# app/engine/grader.py

"""
RULE-BASED SUBMISSION GRADER

Deterministic, no AI involved.

RULES:
- max score = sum of question points
- a question is auto-gradable only if it has a non-empty correct answer
- multiple-choice: exact string match
- checkbox: same set of options (order does not matter)
- correct = full points, incorrect = zero, no partial credit
- subjective questions keep the points a reviewer assigned (default 0)
- answers to questions no longer in the assessment score 0
"""

from typing import Any, Dict, List, Optional, Sequence

from app.schemas.assessment import Question


def _is_auto_gradable(question: Question) -> bool:
    correct = question.correct_answer
    if correct is None:
        return False
    if isinstance(correct, list):
        return len(correct) > 0
    return correct != ""


def score_choice(candidate_answer: Any, question: Question) -> bool:
    """Binary correctness for a choice question."""
    correct = question.correct_answer

    if question.type == "multiple-choice":
        return candidate_answer == correct

    if question.type == "checkbox":
        expected = sorted(correct) if isinstance(correct, list) else [correct]
        given = sorted(candidate_answer) if isinstance(candidate_answer, list) else []
        return expected == given

    return False


def grade_answers(
    answers: Sequence[Dict[str, Any]],
    questions: Sequence[Question],
) -> Dict[str, Any]:
    """
    Grade a submission's answer list against the assessment questions.

    Args:
        answers: ``[{"question_id", "question_text", "answer", "points"?}]``
        questions: all questions of the assessment, in any order

    Returns:
        ``{"score", "max_score", "answers"}`` where each answer carries
        ``points`` and ``is_correct`` (None when not auto-gradable)
    """
    by_id = {q.id: q for q in questions}
    max_score = sum(q.points or 0 for q in questions)

    graded: List[Dict[str, Any]] = []
    for entry in answers:
        question: Optional[Question] = by_id.get(entry.get("question_id"))

        if question is None:
            graded.append({**entry, "is_correct": None, "points": 0})
            continue

        if not _is_auto_gradable(question):
            graded.append({**entry, "is_correct": None, "points": entry.get("points") or 0})
            continue

        is_correct = score_choice(entry.get("answer"), question)
        graded.append({
            **entry,
            "is_correct": is_correct,
            "points": (question.points or 0) if is_correct else 0,
        })

    score = sum(item["points"] or 0 for item in graded)
    return {"score": score, "max_score": max_score, "answers": graded}


def apply_manual_points(
    answers: Sequence[Dict[str, Any]],
    points: Dict[str, float],
) -> Dict[str, Any]:
    """Overwrite reviewer points per question id and recompute the total."""
    updated = [
        {**entry, "points": points[entry["question_id"]]} if entry.get("question_id") in points else dict(entry)
        for entry in answers
    ]
    score = sum(item.get("points") or 0 for item in updated)
    return {"score": score, "answers": updated}
