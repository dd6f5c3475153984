from quizkey.services.grading import grade_question, grade_quiz, total_score


def test_all_correct(sample_quiz):
    results = grade_quiz(
        sample_quiz,
        {"q1": "1", "q2": ["3", "1"], "q3": "  berlin ", "q4": "false", "q5": "Because of wars."},
    )
    assert [r.is_correct for r in results] == [True, True, True, True, True]
    assert total_score(results) == (20, 20)


def test_wrong_and_missing_answers(sample_quiz):
    results = grade_quiz(sample_quiz, {"q1": "2", "q2": ["1"], "q4": "true"})
    by_id = {r.question_id: r for r in results}
    assert by_id["q1"].is_correct is False
    assert by_id["q1"].score == 0
    assert by_id["q1"].max_score == 5
    assert by_id["q2"].is_correct is False
    assert by_id["q3"].is_correct is False
    assert by_id["q4"].is_correct is False
    assert total_score(results) == (0, 20)


def test_subjective_is_self_reviewed(sample_quiz):
    result = grade_question(sample_quiz.questions[4], None)
    assert result.is_correct is True
    assert result.score == 0
    assert result.feedback == "Politics, trade routes, defence."


def test_fill_in_the_blank_synonym_group(sample_quiz):
    q = sample_quiz.questions[2].model_copy(update={"correct_answers": ["color|colour"]})
    assert grade_question(q, "Colour").is_correct
    assert grade_question(q, "COLOR ").is_correct
    assert not grade_question(q, "col").is_correct


def test_wrong_answer_shape_is_incorrect(sample_quiz):
    assert not grade_question(sample_quiz.questions[0], ["1"]).is_correct
    assert not grade_question(sample_quiz.questions[1], "1,3").is_correct
