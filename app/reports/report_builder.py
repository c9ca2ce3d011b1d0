from datetime import datetime
from typing import Any, Dict, List, Optional


def _format_answer(answer: Any) -> str:
    if isinstance(answer, list):
        return "; ".join(str(a) for a in answer)
    return str(answer) if answer not in (None, "") else "(no answer)"


def performance_band(score: Optional[float], max_score: Optional[float]) -> Dict[str, Any]:
    percentage = round((score or 0) / max_score * 100, 2) if max_score else 0.0

    if percentage >= 75:
        level = "Advanced"
    elif percentage >= 50:
        level = "Intermediate"
    else:
        level = "Beginner"

    status = "Pass" if percentage >= 50 else "Fail"
    return {"percentage": percentage, "level": level, "status": status}


def generate_submission_report(submission: Dict[str, Any]) -> Dict[str, Any]:
    """
    Summarize one stored submission for reviewers.

    ``submission`` carries the submission row's columns; answers are the
    graded entries written at submit time.
    """
    answers: List[Dict[str, Any]] = submission.get("answers") or []
    score = submission.get("score") or 0
    max_score = submission.get("max_score") or 0
    band = performance_band(score, max_score)

    correct = sum(1 for a in answers if a.get("is_correct") is True)
    incorrect = sum(1 for a in answers if a.get("is_correct") is False)
    manual = sum(1 for a in answers if a.get("is_correct") is None)

    # -------------------------
    # SUMMARY
    # -------------------------
    summary = [
        f"{submission.get('candidate_name', 'N/A')} completed \"{submission.get('assessment_title', '')}\" "
        f"in {submission.get('time_taken', 0)} seconds.",
        f"Overall score: {score:g} out of {max_score:g} ({band['percentage']}%).",
        f"Auto-graded answers: {correct} correct, {incorrect} incorrect.",
    ]
    if manual:
        summary.append(f"{manual} answer(s) require manual review.")

    # -------------------------
    # PER-QUESTION BREAKDOWN
    # -------------------------
    breakdown = []
    for entry in answers:
        if entry.get("is_correct") is None:
            verdict = "Manual review"
        else:
            verdict = "Correct" if entry["is_correct"] else "Incorrect"

        breakdown.append({
            "question": entry.get("question_text", entry.get("question_id", "")),
            "answer": _format_answer(entry.get("answer")),
            "points": entry.get("points") or 0,
            "verdict": verdict,
        })

    submitted_at = submission.get("submitted_at")
    return {
        "candidate": {
            "name": submission.get("candidate_name"),
            "email": submission.get("candidate_email"),
        },
        "assessment_title": submission.get("assessment_title"),
        "submitted_at": submitted_at.isoformat() if isinstance(submitted_at, datetime) else submitted_at,
        "summary": summary,
        "scores": {
            "total_score": score,
            "max_score": max_score,
            **band,
        },
        "question_breakdown": breakdown,
        "generated_at": datetime.utcnow().isoformat(),
    }
