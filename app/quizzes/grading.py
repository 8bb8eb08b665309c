from typing import List, Sequence

from app.quizzes.errors import BadRequestError

# ==================== QUESTION SET INVARIANTS ====================

def validate_questions(questions: Sequence[dict]):
    """
    Enforce the stored question-set invariants:
    - at least one question
    - non-empty question text
    - at least 2 options per question
    - correct_option_index is a valid index into that question's options
    """
    if not isinstance(questions, (list, tuple)) or len(questions) == 0:
        raise BadRequestError("questions must be a non-empty array")

    for position, question in enumerate(questions, start=1):
        text = question.get("question_text")
        if not isinstance(text, str) or not text.strip():
            raise BadRequestError(f"Question {position}: question_text is required")

        options = question.get("options")
        if not isinstance(options, (list, tuple)) or len(options) < 2:
            raise BadRequestError(f"Question {position}: at least 2 options are required")

        index = question.get("correct_option_index")
        # bool is an int subclass; True must not pass as index 1
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(options):
            raise BadRequestError(
                f"Question {position}: correct_option_index must be between 0 and {len(options) - 1}"
            )

# ==================== GRADING ====================

def is_correct_answer(selected, correct_option_index: int) -> bool:
    """Strict match: wrong type or out-of-range values never count"""
    if isinstance(selected, bool) or not isinstance(selected, int):
        return False
    return selected == correct_option_index


def answer_breakdown(questions: Sequence[dict], selected_options: Sequence) -> List[bool]:
    """
    Per-question correctness, aligned by position
    Missing answers (shorter selected_options) count as incorrect
    """
    results = []
    for i, question in enumerate(questions):
        selected = selected_options[i] if i < len(selected_options) else None
        results.append(is_correct_answer(selected, question["correct_option_index"]))
    return results


def grade_answers(questions: Sequence[dict], selected_options: Sequence) -> int:
    """Number of correct answers"""
    return sum(answer_breakdown(questions, selected_options))


def compute_score(correct_count: int, total_questions: int) -> int:
    """
    Percentage score rounded half up, computed on integers:
    1/3 -> 33, 2/3 -> 67, 3/8 -> 38, 5/8 -> 63
    """
    if total_questions <= 0:
        return 0
    return (correct_count * 200 + total_questions) // (2 * total_questions)
