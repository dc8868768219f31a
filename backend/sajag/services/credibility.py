"""
Credibility presentation — How a score is shown to the user.

The score itself is never modified here. These helpers only decide the
label, the colour of the score bar, and how wide to draw it.

    score   label                    band
    > 90    Extremely Credible       green
    > 70    Highly Credible          green
    > 50    Moderately Credible      yellow
    > 40    Potentially Misleading   yellow
    > 30    Potentially Misleading   red
    <= 30   Highly Misleading        red
"""

from sajag.models.schemas import AnalysisReport, AnalysisResult

# (threshold, label): first threshold the score exceeds wins
SCORE_LABELS = [
    (90, "Extremely Credible"),
    (70, "Highly Credible"),
    (50, "Moderately Credible"),
    (30, "Potentially Misleading"),
]
LOWEST_LABEL = "Highly Misleading"

SCORE_BANDS = [
    (70, "green"),
    (40, "yellow"),
]
LOWEST_BAND = "red"


def score_label(score: float) -> str:
    for threshold, label in SCORE_LABELS:
        if score > threshold:
            return label
    return LOWEST_LABEL


def score_band(score: float) -> str:
    for threshold, band in SCORE_BANDS:
        if score > threshold:
            return band
    return LOWEST_BAND


def bar_width(score: float) -> float:
    """Bar width in percent. Out-of-range scores are clamped for drawing only."""
    return max(0.0, min(100.0, float(score)))


def build_report(result: AnalysisResult) -> AnalysisReport:
    """Attach presentation hints to a parsed analysis."""
    score = result.credibility_score
    return AnalysisReport(
        credibility_score=score,
        breakdown=result.breakdown,
        label=score_label(score),
        band=score_band(score),
        bar_width=bar_width(score),
    )
