from __future__ import annotations

from quizkey.schemas.quiz import GradeResult, Question, QuestionType, QuizSet


def _norm_text(value: str) -> str:
    return (value or "").strip().lower()


def _accepted_answers(question: Question) -> set[str]:
    # "color|colour" accepts either spelling.
    out: set[str] = set()
    for ans in question.correct_answers:
        for part in str(ans).split("|"):
            part = _norm_text(part)
            if part:
                out.add(part)
    return out


def _is_correct(*, question: Question, answer: str | list[str] | None) -> bool:
    if question.type in (QuestionType.SINGLE_CHOICE, QuestionType.TRUE_FALSE):
        if not question.correct_answers or not isinstance(answer, str):
            return False
        return answer == question.correct_answers[0]

    if question.type == QuestionType.MULTIPLE_CHOICE:
        if not isinstance(answer, list):
            return False
        return sorted(str(a) for a in answer) == sorted(question.correct_answers)

    if question.type == QuestionType.FILL_IN_THE_BLANK:
        if not isinstance(answer, str):
            return False
        return _norm_text(answer) in _accepted_answers(question)

    return False


def grade_question(question: Question, answer: str | list[str] | None) -> GradeResult:
    if question.type == QuestionType.SUBJECTIVE:
        # Not auto-graded: shown against the reference for self-review.
        return GradeResult(
            question_id=question.id,
            is_correct=True,
            score=0,
            max_score=question.points,
            feedback=question.subjective_reference,
        )

    ok = _is_correct(question=question, answer=answer)
    return GradeResult(
        question_id=question.id,
        is_correct=ok,
        score=question.points if ok else 0,
        max_score=question.points,
        feedback=question.explanation,
    )


def grade_quiz(quiz: QuizSet, answers: dict[str, str | list[str]]) -> list[GradeResult]:
    return [grade_question(q, answers.get(q.id)) for q in quiz.questions]


def total_score(results: list[GradeResult]) -> tuple[int | float, int | float]:
    """Return ``(score, max_score)`` summed over ``results``."""
    return sum(r.score for r in results), sum(r.max_score for r in results)
