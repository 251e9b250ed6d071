"""Map a marker's trend direction to an educational colour cue.

positive = often associated with favourable patterns, risk = may correlate
with risk patterns, neutral = context-dependent. Not medical advice.
"""

from dataclasses import dataclass
from typing import Literal

from labtrack.services.marker_priority import names_overlap

IndicatorType = Literal["positive", "risk", "neutral"]

STABLE_TOOLTIP = "Trend stable. Individual variability emphasized."
UNKNOWN_TOOLTIP = "Trend direction is context-dependent. Consult a physician for interpretation."


@dataclass(frozen=True)
class MarkerTrendConfig:
    marker: str
    up_means: IndicatorType
    down_means: IndicatorType
    up_tooltip: str
    down_tooltip: str
    what_it_is: str | None = None
    why_monitor: str | None = None


@dataclass(frozen=True)
class TrendIndicator:
    type: IndicatorType
    tooltip: str


_TESTOSTERONE_UP = "Often associated with improved energy and muscle patterns in optimization communities."
_TESTOSTERONE_DOWN = "May correlate with fatigue or HPTA patterns; forums stress physician oversight."
_TESTOSTERONE_WHAT = "Key male hormone affecting energy, muscle and libido."
_TESTOSTERONE_WHY = "Trends often tied to strength, recovery and energy in communities."
_HDL_UP = "Often associated with improved lipid patterns in forums."
_HDL_DOWN = "May correlate with cardiovascular risk patterns in literature; variability is high."
_HDL_WHAT = '"Good" cholesterol that helps clear arteries.'
_HDL_WHY = "Commonly discussed for heart health in optimization communities."

# First match wins, so more specific names come before their substrings.
MARKER_PATTERNS = (
    MarkerTrendConfig("HDL Cholesterol", "positive", "risk", _HDL_UP, _HDL_DOWN, _HDL_WHAT, _HDL_WHY),
    MarkerTrendConfig("HDL", "positive", "risk", _HDL_UP, _HDL_DOWN, _HDL_WHAT, _HDL_WHY),
    MarkerTrendConfig(
        "LDL",
        "risk",
        "positive",
        "May correlate with cardiovascular risk patterns in literature.",
        "Often associated with improved lipid patterns in optimization communities.",
    ),
    MarkerTrendConfig(
        "Total Cholesterol",
        "risk",
        "positive",
        "May correlate with lipid risk patterns; context-dependent.",
        "Often discussed as an improved lipid profile in certain contexts.",
    ),
    MarkerTrendConfig(
        "Triglycerides",
        "risk",
        "positive",
        "May correlate with metabolic risk patterns in literature.",
        "Often associated with improved metabolic markers in forums.",
    ),
    MarkerTrendConfig(
        "Testosterone Total", "positive", "risk",
        _TESTOSTERONE_UP, _TESTOSTERONE_DOWN, _TESTOSTERONE_WHAT, _TESTOSTERONE_WHY,
    ),
    MarkerTrendConfig(
        "Total Testosterone", "positive", "risk",
        _TESTOSTERONE_UP, _TESTOSTERONE_DOWN, _TESTOSTERONE_WHAT, _TESTOSTERONE_WHY,
    ),
    MarkerTrendConfig(
        "Free Testosterone",
        "positive",
        "risk",
        "Often discussed for tracking bioavailable androgen patterns.",
        "May correlate with suppression patterns; literature emphasizes variability.",
    ),
    MarkerTrendConfig(
        "LH",
        "positive",
        "risk",
        "Often associated with HPTA recovery patterns in literature.",
        "May correlate with suppression patterns; communities urge monitoring.",
    ),
    MarkerTrendConfig(
        "FSH",
        "positive",
        "risk",
        "Often associated with HPTA recovery patterns in forums.",
        "May correlate with suppression patterns; individual variability is high.",
    ),
    MarkerTrendConfig(
        "Estradiol",
        "risk",
        "neutral",
        "May correlate with estrogen-related patterns (gyno, mood); forums stress variability.",
        "Often discussed for balance; context-dependent.",
        "Estrogen hormone; balance preferred.",
        "Highs and lows discussed with mood, gyno and joint patterns in forums.",
    ),
    MarkerTrendConfig(
        "E2",
        "risk",
        "neutral",
        "May correlate with estrogen-related patterns in literature.",
        "Often discussed for balance; context-dependent.",
    ),
    MarkerTrendConfig(
        "Prolactin",
        "risk",
        "positive",
        "May correlate with libido and mood patterns in certain contexts.",
        "Often associated with improved dopamine balance in forums.",
        "Dopamine-related hormone from the pituitary.",
        "Highs linked to libido and mood in 19-nor discussions.",
    ),
    MarkerTrendConfig(
        "SHBG",
        "neutral",
        "neutral",
        "Context-dependent; often discussed for free hormone availability.",
        "Context-dependent; literature notes individual variability.",
    ),
    MarkerTrendConfig(
        "ALT",
        "risk",
        "positive",
        "May correlate with liver strain patterns; forums stress variability.",
        "Often associated with improved hepatic markers in communities.",
        "Liver enzyme indicating cellular activity.",
        "Elevations frequently noted in oral compound contexts.",
    ),
    MarkerTrendConfig(
        "AST",
        "risk",
        "positive",
        "May correlate with hepatic stress patterns in literature.",
        "Often discussed as improved liver markers in forums.",
    ),
    MarkerTrendConfig(
        "GGT",
        "risk",
        "positive",
        "May correlate with liver stress patterns; individual variability is high.",
        "Often associated with improved hepatic markers.",
    ),
    MarkerTrendConfig(
        "Creatinine",
        "risk",
        "neutral",
        "May correlate with kidney stress patterns; literature stresses oversight.",
        "Context-dependent; often within normal variation.",
    ),
    MarkerTrendConfig(
        "eGFR",
        "positive",
        "risk",
        "Often associated with improved kidney function patterns.",
        "May correlate with kidney function patterns; physician review recommended.",
    ),
    MarkerTrendConfig(
        "Hematocrit",
        "risk",
        "positive",
        "May correlate with viscosity and thrombosis risk patterns in literature.",
        "Often discussed as improved flow in TRT and EPO contexts.",
        "Proportion of red blood cells; affects blood thickness.",
        "Highs associated with clotting risks in some protocols.",
    ),
    MarkerTrendConfig(
        "Hemoglobin",
        "risk",
        "neutral",
        "May correlate with viscosity patterns; forums stress variability.",
        "Context-dependent; often within normal variation.",
    ),
    MarkerTrendConfig(
        "Glucose",
        "risk",
        "neutral",
        "May correlate with metabolic risk patterns in literature.",
        "Context-dependent; confirm with a physician.",
    ),
    MarkerTrendConfig(
        "HbA1c",
        "risk",
        "positive",
        "May correlate with long-term metabolic patterns.",
        "Often associated with improved metabolic markers in forums.",
    ),
    MarkerTrendConfig(
        "Insulin",
        "risk",
        "positive",
        "May correlate with insulin resistance patterns; variability is high.",
        "Often discussed as improved metabolic sensitivity.",
    ),
    MarkerTrendConfig(
        "CRP",
        "risk",
        "positive",
        "May correlate with inflammation patterns in literature.",
        "Often associated with reduced inflammation in communities.",
    ),
    MarkerTrendConfig(
        "Vitamin D",
        "positive",
        "risk",
        "Often associated with improved bone and immune patterns in forums.",
        "May correlate with deficiency patterns; supplementation often discussed.",
    ),
    MarkerTrendConfig(
        "Ferritin",
        "risk",
        "neutral",
        "May correlate with iron overload patterns; context-dependent.",
        "Often discussed for deficiency; individual variability.",
    ),
)


def get_trend_config(marker_name: str) -> MarkerTrendConfig | None:
    for config in MARKER_PATTERNS:
        if names_overlap(marker_name, config.marker):
            return config
    return None


def get_layman_notes(marker_name: str) -> dict[str, str] | None:
    config = get_trend_config(marker_name)
    if config is None or not config.what_it_is or not config.why_monitor:
        return None
    return {"whatItIs": config.what_it_is, "whyMonitor": config.why_monitor}


def get_trend_indicator(marker_name: str, direction: str) -> TrendIndicator:
    if direction == "stable":
        return TrendIndicator(type="neutral", tooltip=STABLE_TOOLTIP)
    config = get_trend_config(marker_name)
    if config is None:
        return TrendIndicator(type="neutral", tooltip=UNKNOWN_TOOLTIP)
    if direction == "up":
        return TrendIndicator(type=config.up_means, tooltip=config.up_tooltip)
    return TrendIndicator(type=config.down_means, tooltip=config.down_tooltip)
