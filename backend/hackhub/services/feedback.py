import math
from collections import Counter
from collections.abc import Sequence
from datetime import datetime

from hackhub.models import (
    FeedbackAnswer,
    FeedbackQuestion,
    FeedbackResponse,
    FeedbackSection,
    QuestionSummary,
    ensure_utc,
)

NUMERIC_TYPES = ("linear_scale", "rating")
CHOICE_TYPES = ("multiple_choice", "checkbox")


def iter_questions(sections: Sequence[FeedbackSection | dict]) -> list[FeedbackQuestion]:
    questions = []
    for section in sections:
        if isinstance(section, dict):
            section = FeedbackSection.model_validate(section)
        questions.extend(section.questions)
    return questions


def _is_blank(value: FeedbackAnswer | None) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return len(value) == 0
    return False


def _scale_bounds(question: FeedbackQuestion) -> tuple[int, int]:
    if question.scale_config:
        return question.scale_config.min, question.scale_config.max
    return 1, 5


def validate_answers(
    sections: Sequence[FeedbackSection | dict], answers: dict[str, FeedbackAnswer]
) -> dict[str, FeedbackAnswer]:
    """
    Check answers against the form and return the non-blank ones.

    Raises ValueError naming the first problem: a required question left blank,
    an answer to a question the form does not have, an option that is not
    offered or a rating outside its scale.
    """
    questions = {q.id: q for q in iter_questions(sections)}
    unknown = sorted(set(answers) - set(questions))
    if unknown:
        raise ValueError(f"Unknown questions: {', '.join(unknown)}")

    cleaned: dict[str, FeedbackAnswer] = {}
    for question in questions.values():
        value = answers.get(question.id)
        if _is_blank(value):
            if question.required:
                raise ValueError(f"Please answer the required question: {question.label}")
            continue

        if question.type in NUMERIC_TYPES:
            low, high = _scale_bounds(question)
            if isinstance(value, bool) or not isinstance(value, int | float) or not low <= value <= high:
                raise ValueError(f"{question.label} must be a number between {low} and {high}")
        elif question.type == "multiple_choice":
            if not isinstance(value, str) or (question.options and value not in question.options):
                raise ValueError(f"{question.label} must be one of the offered options")
        elif question.type == "checkbox":
            values = value if isinstance(value, list) else [value]
            if question.options and any(v not in question.options for v in values):
                raise ValueError(f"{question.label} contains an option that is not offered")
            value = [str(v) for v in values]
        elif not isinstance(value, str):
            value = str(value)
        cleaned[question.id] = value
    return cleaned


def completion_minutes(started_at: datetime | None, submitted_at: datetime) -> int | None:
    if started_at is None:
        return None
    elapsed = (ensure_utc(submitted_at) - ensure_utc(started_at)).total_seconds()
    if elapsed < 0:
        return None
    return round(elapsed / 60)


def summarize_questions(
    sections: Sequence[FeedbackSection | dict], responses: Sequence[FeedbackResponse]
) -> list[QuestionSummary]:
    summaries = []
    for question in iter_questions(sections):
        values = [r.answers[question.id] for r in responses if question.id in (r.answers or {})]
        summary = QuestionSummary(
            question_id=question.id,
            label=question.label,
            type=question.type,
            response_count=len(values),
        )
        if question.type in NUMERIC_TYPES:
            numbers = [float(v) for v in values if isinstance(v, int | float) and not isinstance(v, bool)]
            if numbers:
                summary.average = round(sum(numbers) / len(numbers), 2)
            summary.distribution = dict(sorted(Counter(str(math.floor(n)) for n in numbers).items()))
        elif question.type in CHOICE_TYPES:
            counter: Counter[str] = Counter()
            for value in values:
                counter.update(value if isinstance(value, list) else [str(value)])
            summary.distribution = dict(counter.most_common())
        summaries.append(summary)
    return summaries
