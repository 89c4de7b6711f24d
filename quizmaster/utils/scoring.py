"""
Score formatting shared by the result screen, history and feedback
"""


def percentage(score: int, total: int) -> int:
    """Whole-number percentage, halves rounded up; 0 for an empty total"""
    if not total:
        return 0
    return int(score * 100 / total + 0.5)


def result_message(pct: int) -> str:
    """Message shown on the completed-quiz screen"""
    if pct >= 90:
        return "Outstanding! You're a quiz master!"
    if pct >= 70:
        return "Great job! You know your stuff!"
    if pct >= 50:
        return "Good effort! Keep learning!"
    return "Keep practicing! You'll get better!"
