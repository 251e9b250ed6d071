import re

from rapidfuzz import fuzz

from labtrack.config import settings

# Stricter than the substring match used for prioritization. Only used to
# label series; grouping still keys on the exact marker name.
MARKER_ALIASES = {
    "Total Testosterone": ("Testosterone Total", "Testosterone, Total", "Total T", "TT", "Testosterone"),
    "Free Testosterone": ("Testosterone Free", "Testosterone, Free", "Free T", "FT"),
    "Estradiol": ("E2", "Estradiol Sensitive", "Estradiol, Sensitive", "Oestradiol"),
    "Prolactin": ("PRL",),
    "HDL Cholesterol": ("HDL", "HDL-C", "High Density Lipoprotein"),
    "LDL Cholesterol": ("LDL", "LDL-C", "LDL Calculated", "Low Density Lipoprotein"),
    "Total Cholesterol": ("Cholesterol", "Cholesterol, Total"),
    "Triglycerides": ("TG", "Trigs"),
    "ALT": ("Alanine Aminotransferase", "SGPT"),
    "AST": ("Aspartate Aminotransferase", "SGOT"),
    "hsCRP": ("High Sensitivity CRP", "hs-CRP", "C-Reactive Protein, Cardiac"),
    "CRP": ("C-Reactive Protein",),
    "Hematocrit": ("Hct", "HCT"),
    "Hemoglobin": ("Hgb", "HGB"),
    "PSA": ("PSA Total", "Prostate Specific Antigen", "PSA, Total"),
    "LH": ("Luteinizing Hormone",),
    "FSH": ("Follicle Stimulating Hormone",),
    "SHBG": ("Sex Hormone Binding Globulin",),
    "HbA1c": ("A1C", "Hemoglobin A1c", "Glycated Hemoglobin"),
    "eGFR": ("Estimated GFR", "GFR"),
    "Vitamin D": ("25-OH Vitamin D", "Vitamin D, 25-Hydroxy", "25(OH)D"),
}


def _normalize(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


def _alias_index() -> dict[str, str]:
    index = {}
    for canonical, aliases in MARKER_ALIASES.items():
        for name in (canonical, *aliases):
            index.setdefault(_normalize(name), canonical)
    return index


_ALIAS_INDEX = _alias_index()


def _fuzzy_match(name_norm: str, threshold: int) -> tuple[str | None, float]:
    best_score = -1.0
    best_name = None
    for alias_norm, canonical in _ALIAS_INDEX.items():
        score = fuzz.ratio(name_norm, alias_norm)
        if score > best_score:
            best_score = score
            best_name = canonical
    if best_score >= threshold:
        return best_name, best_score
    return None, best_score


def resolve_canonical_marker(name: str, threshold: int | None = None) -> str | None:
    """Canonical marker name for a raw lab label, or None if unknown."""
    name_norm = _normalize(name)
    if not name_norm:
        return None
    if name_norm in _ALIAS_INDEX:
        return _ALIAS_INDEX[name_norm]
    score_threshold = threshold if threshold is not None else settings.marker_fuzzy_threshold
    match, _ = _fuzzy_match(name_norm, score_threshold)
    return match
