import pytest

from conftest import make_quiz
from learnhub.assessment.quiz_engine import QuizSession, SessionState
from learnhub.courses.course_models import Quiz
from learnhub.errors import IncompleteSubmissionError, NotFoundError, ValidationError


def answer_all(session, answers):
    for question, option in zip(session.quiz.questions, answers):
        session.select_answer(question.id, option)


def test_start_creates_fresh_session(quiz):
    session = QuizSession.start(quiz)
    assert session.state == SessionState.IN_PROGRESS
    assert session.current_index == 0
    assert session.answers == {}
    assert session.submitted is False
    assert session.violations == 0


def test_start_rejects_quiz_without_questions():
    with pytest.raises(ValidationError):
        QuizSession.start(Quiz(id="empty", questions=[]))


def test_unstarted_session_ignores_input(quiz):
    session = QuizSession(quiz)
    assert session.state == SessionState.NOT_STARTED
    session.select_answer("q1", 0)
    assert session.answers == {}
    with pytest.raises(ValidationError):
        session.submit()


def test_select_answer_overwrites(quiz):
    session = QuizSession.start(quiz)
    session.select_answer("q1", 1)
    session.select_answer("q1", 0)
    assert session.answers == {"q1": 0}


def test_select_answer_rejects_bad_option_and_keeps_state(quiz):
    session = QuizSession.start(quiz)
    session.select_answer("q1", 1)
    with pytest.raises(ValidationError):
        session.select_answer("q1", 2)
    with pytest.raises(ValidationError):
        session.select_answer("q1", -1)
    assert session.answers == {"q1": 1}


def test_select_answer_unknown_question(quiz):
    session = QuizSession.start(quiz)
    with pytest.raises(NotFoundError):
        session.select_answer("nope", 0)


def test_navigation_clamps():
    session = QuizSession.start(make_quiz(correct=(0, 1, 0)))
    session.previous()
    assert session.current_index == 0
    session.next()
    session.next()
    session.next()
    assert session.current_index == 2
    assert session.is_last_question
    session.go_to_question(-5)
    assert session.current_index == 0
    session.go_to_question(99)
    assert session.current_index == 2


def test_submit_rejected_until_every_question_answered(quiz):
    session = QuizSession.start(quiz)
    session.select_answer("q1", 0)
    with pytest.raises(IncompleteSubmissionError) as exc:
        session.submit()
    assert exc.value.unanswered == ["q2"]
    assert session.state == SessionState.IN_PROGRESS
    assert session.submitted is False


def test_submit_is_idempotent_and_freezes_answers(quiz):
    session = QuizSession.start(quiz)
    answer_all(session, [0, 0])
    session.submit()
    session.submit()
    assert session.state == SessionState.SUBMITTED

    session.select_answer("q2", 1)
    session.next()
    assert session.answers == {"q1": 0, "q2": 0}
    assert session.current_index == 0


def test_all_correct_scores_one(quiz):
    session = QuizSession.start(quiz)
    answer_all(session, [0, 1])
    session.submit()
    assert session.score() == 1.0
    assert session.result() == (100, True)


def test_all_incorrect_scores_zero(quiz):
    session = QuizSession.start(quiz)
    answer_all(session, [1, 0])
    session.submit()
    assert session.score() == 0.0
    assert session.result().passed is False


def test_half_correct_fails_and_allows_retake(quiz):
    session = QuizSession.start(quiz)
    answer_all(session, [0, 0])
    session.submit()
    result = session.result()
    assert result.score_percent == 50
    assert result.passed is False
    assert session.can_retake()


def test_pass_mark_is_inclusive():
    session = QuizSession.start(make_quiz(correct=(0, 0, 0, 0, 0), pass_mark=0.8))
    answer_all(session, [0, 0, 0, 0, 1])
    session.submit()
    assert session.result() == (80, True)


def test_score_percent_rounds_half_up():
    session = QuizSession.start(make_quiz(correct=(0,) * 8, pass_mark=0.5))
    # 5/8 = 62.5%
    answer_all(session, [0, 0, 0, 0, 0, 1, 1, 1])
    session.submit()
    assert session.result().score_percent == 63


def test_result_requires_submission(quiz):
    session = QuizSession.start(quiz)
    with pytest.raises(ValidationError):
        session.result()


def test_violations_never_block_answering(quiz):
    session = QuizSession.start(quiz)
    assert session.record_violation() == 1
    assert session.record_violation() == 2
    assert session.submitted is False
    answer_all(session, [0, 1])
    session.submit()
    assert session.result().passed
    assert session.violations == 2


def test_violations_after_submit_are_not_counted(quiz):
    session = QuizSession.start(quiz)
    answer_all(session, [0, 1])
    session.submit()
    assert session.record_violation() == 0


def test_retake_resets_everything(quiz):
    session = QuizSession.start(quiz)
    for _ in range(3):
        session.record_violation()
    answer_all(session, [1, 1])
    session.next()
    session.submit()

    session.retake()
    assert session.state == SessionState.IN_PROGRESS
    assert session.answers == {}
    assert session.violations == 0
    assert session.current_index == 0
    assert session.submitted is False
    assert session.attempts == 2


def test_retake_refused_after_pass(quiz):
    session = QuizSession.start(quiz)
    answer_all(session, [0, 1])
    session.submit()
    with pytest.raises(ValidationError):
        session.retake()
    assert session.state == SessionState.SUBMITTED


def test_retake_refused_while_in_progress(quiz):
    session = QuizSession.start(quiz)
    with pytest.raises(ValidationError):
        session.retake()


def test_finalize_is_terminal(quiz):
    session = QuizSession.start(quiz)
    answer_all(session, [0, 1])
    session.submit()
    assert session.finalize() == (100, True)
    assert session.state == SessionState.FINALIZED
    with pytest.raises(ValidationError):
        session.select_answer("q1", 1)
    with pytest.raises(ValidationError):
        session.finalize()
    assert session.result() == (100, True)


def test_finalize_requires_submission(quiz):
    session = QuizSession.start(quiz)
    with pytest.raises(ValidationError):
        session.finalize()
    assert session.state == SessionState.IN_PROGRESS
