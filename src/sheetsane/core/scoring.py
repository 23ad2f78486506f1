"""Quality score calculation."""

from typing import Iterable, Tuple

from sheetsane.core.models import Finding, Severity

START_SCORE = 100
ERROR_PENALTY = 10
ERROR_PENALTY_CAP = 70
WARNING_PENALTY = 3
WARNING_PENALTY_CAP = 30


def calculate_score(findings: Iterable[Finding]) -> Tuple[int, str]:
    """Convert findings into a 0-100 score and a readable explanation.

    Each error costs 10 points (capped at 70), each warning 3 points (capped
    at 30). Info findings never affect the score.

    Args:
        findings: Findings of one analysis run

    Returns:
        Tuple of (score, explanation)
    """
    findings = list(findings)
    errors = sum(1 for f in findings if f.severity == Severity.ERROR)
    warnings = sum(1 for f in findings if f.severity == Severity.WARNING)

    error_penalty = min(errors * ERROR_PENALTY, ERROR_PENALTY_CAP)
    warning_penalty = min(warnings * WARNING_PENALTY, WARNING_PENALTY_CAP)
    score = max(0, START_SCORE - error_penalty - warning_penalty)

    explanation = f"Starting score: {START_SCORE}. "
    if errors > 0:
        explanation += (
            f"{errors} error(s) × {ERROR_PENALTY} points = -{error_penalty} "
            f"(capped at {ERROR_PENALTY_CAP}). "
        )
    if warnings > 0:
        explanation += (
            f"{warnings} warning(s) × {WARNING_PENALTY} points = -{warning_penalty} "
            f"(capped at {WARNING_PENALTY_CAP}). "
        )
    if errors == 0 and warnings == 0:
        explanation += "No issues found! "
    explanation += f"Final score: {score}/100."

    return score, explanation
