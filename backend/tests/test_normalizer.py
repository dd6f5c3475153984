import copy

import pytest

from quizkey.schemas.quiz import Option, QuestionType
from quizkey.services.normalizer import QuizValidationError, normalize_quiz, parse_quiz_document


def test_string_options_and_index_answers():
    quiz = normalize_quiz(
        {"questions": [{"type": "SINGLE_CHOICE", "options": ["A", "B"], "correctAnswers": [1]}]}
    )
    q = quiz.questions[0]
    assert q.options == [Option(id="1", text="A"), Option(id="2", text="B")]
    assert q.correct_answers == ["2"]


def test_multiple_choice_indexes_map_to_one_based_ids():
    quiz = normalize_quiz(
        {
            "questions": [
                {
                    "type": "MULTIPLE_CHOICE",
                    "options": ["TypeScript", "HTML", "Python", "JSON"],
                    "correctAnswers": [0, 2],
                }
            ]
        }
    )
    assert quiz.questions[0].correct_answers == ["1", "3"]


def test_string_answers_kept_as_is():
    quiz = normalize_quiz(
        {
            "questions": [
                {
                    "type": "SINGLE_CHOICE",
                    "options": [{"id": "a", "text": "Yes"}, {"id": "b", "text": "No"}],
                    "correctAnswers": ["b"],
                }
            ]
        }
    )
    q = quiz.questions[0]
    assert [o.id for o in q.options] == ["a", "b"]
    assert q.correct_answers == ["b"]


def test_non_choice_numbers_are_coerced_to_strings():
    quiz = normalize_quiz({"questions": [{"type": "FILL_IN_THE_BLANK", "correctAnswers": [42, "forty-two"]}]})
    assert quiz.questions[0].correct_answers == ["42", "forty-two"]


def test_true_false_booleans():
    quiz = normalize_quiz({"questions": [{"type": "TRUE_FALSE", "correctAnswers": [False]}]})
    assert quiz.questions[0].correct_answers == ["false"]


def test_missing_ids_are_generated():
    quiz = normalize_quiz({"title": "T", "questions": [{"type": "SUBJECTIVE", "text": "Why?"}]})
    assert quiz.id
    assert quiz.questions[0].id
    assert quiz.questions[0].id != quiz.id


def test_existing_ids_are_kept():
    quiz = normalize_quiz({"id": "keep", "questions": [{"id": "q-7", "type": "SUBJECTIVE"}]})
    assert quiz.id == "keep"
    assert quiz.questions[0].id == "q-7"


def test_bare_question_list():
    quiz = normalize_quiz([{"type": "TRUE_FALSE", "text": "Sky is blue", "correctAnswers": ["true"]}])
    assert len(quiz.questions) == 1
    assert quiz.title == ""


def test_loose_type_spelling():
    quiz = normalize_quiz({"questions": [{"type": "single choice"}, {"type": "fill-in-the-blank"}, {"type": 3}]})
    assert [q.type for q in quiz.questions] == [
        QuestionType.SINGLE_CHOICE,
        QuestionType.FILL_IN_THE_BLANK,
        QuestionType.TRUE_FALSE,
    ]


@pytest.mark.parametrize("raw", ["quiz", 12, None, True])
def test_rejects_non_object(raw):
    with pytest.raises(QuizValidationError):
        normalize_quiz(raw)


def test_rejects_questions_not_a_list():
    with pytest.raises(QuizValidationError, match="questions must be a list"):
        normalize_quiz({"questions": {"type": "SINGLE_CHOICE"}})


def test_rejects_unknown_type():
    with pytest.raises(QuizValidationError, match="question 1"):
        normalize_quiz({"questions": [{"type": "ESSAY"}]})


def test_rejects_negative_points():
    with pytest.raises(QuizValidationError):
        normalize_quiz({"questions": [{"type": "SUBJECTIVE", "points": -1}]})


def test_input_is_not_mutated():
    raw = {"questions": [{"type": "SINGLE_CHOICE", "options": ["A", "B"], "correctAnswers": [0]}]}
    before = copy.deepcopy(raw)
    normalize_quiz(raw)
    assert raw == before


def test_normalization_is_idempotent():
    raw = {
        "title": "Mixed",
        "questions": [
            {"type": "SINGLE_CHOICE", "options": ["A", "B", "C"], "correctAnswers": [2], "points": 5},
            {"type": "TRUE_FALSE", "correctAnswers": [True]},
            {"type": "FILL_IN_THE_BLANK", "correctAnswers": ["color|colour"]},
        ],
    }
    once = normalize_quiz(raw)
    twice = normalize_quiz(once.to_document())
    assert twice == once


def test_parse_document_with_code_fence():
    text = '```json\n{"title": "Fenced", "questions": []}\n```'
    assert parse_quiz_document(text).title == "Fenced"


def test_parse_document_inside_prose():
    text = 'Here is your quiz:\n{"title": "Prose", "questions": [{"type": "TRUE_FALSE", "correctAnswers": ["true"]}]}\nEnjoy!'
    quiz = parse_quiz_document(text)
    assert quiz.title == "Prose"
    assert quiz.questions[0].correct_answers == ["true"]


def test_parse_document_rejects_garbage():
    with pytest.raises(QuizValidationError):
        parse_quiz_document("not json at all")
    with pytest.raises(QuizValidationError):
        parse_quiz_document("   ")
