import pydantic
import pytest

from lesson_service.models import Difficulty, QuestionType
from lesson_service.schemas import LessonCreate, LessonUpdate, QuizQuestionIn


def test_question_defaults_and_camel_case():
    q = QuizQuestionIn.model_validate({
        'id': 'q1',
        'question': 'Hello?',
        'correctAnswer': 'Hola',
        'options': ['Hola', 'Ciao'],
    })
    assert q.type == QuestionType.MULTIPLE_CHOICE
    assert q.order_index == 0
    assert q.model_dump(by_alias=True)['correctAnswer'] == 'Hola'


def test_snake_case_input_accepted():
    q = QuizQuestionIn(id='q1', question='Hello?', correct_answer='Hola', options=['Hola'], order_index=3)
    assert q.order_index == 3


def test_multiple_choice_answer_must_be_an_option():
    with pytest.raises(pydantic.ValidationError):
        QuizQuestionIn(id='q1', question='Hello?', correct_answer='Hallo', options=['Hola', 'Ciao'])


def test_other_types_skip_option_check():
    q = QuizQuestionIn(id='q1', question='Say hello', correct_answer='Hola', type='SPEAKING')
    assert q.options == []


def test_enums_are_not_coerced():
    with pytest.raises(pydantic.ValidationError):
        LessonCreate(id='x', title='x', difficulty='beginner')
    assert LessonCreate(id='x', title='x', difficulty='ADVANCED').difficulty == Difficulty.ADVANCED


def test_lesson_field_limits():
    with pytest.raises(pydantic.ValidationError):
        LessonCreate(id='x', title='   ')
    with pytest.raises(pydantic.ValidationError):
        LessonCreate(id='x', title='x', estimated_minutes=0)
    with pytest.raises(pydantic.ValidationError):
        LessonCreate(title='no id')


def test_topics_deduplicated_in_order():
    lesson = LessonCreate(id='x', title='x', topics=['b', 'a', 'b'])
    assert lesson.topics == ['b', 'a']


def test_update_questions_default_to_none():
    assert LessonUpdate(title='x').questions is None
    assert LessonCreate(id='x', title='x').questions == []
