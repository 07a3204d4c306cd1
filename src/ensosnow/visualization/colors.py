"""Color definitions for ENSO phase charts.

- ENSO phase: El Niño red, La Niña blue, Neutral violet
- Phase strength: ColorBrewer "Paired" reds (El Niño), lavender (Neutral)
  and blues (La Niña), darker for strong phases
"""

from ensosnow.analysis.enso import EL_NINO, LA_NINA, NEUTRAL


# =============================================================================
# ENSO PHASE COLORS
# =============================================================================

ENSO_COLORS = {
    EL_NINO: "red",
    LA_NINA: "blue",
    NEUTRAL: "violet",
}

# Unclassified years
MISSING_COLOR = "#999999"


def enso_to_color(phase: str | None) -> str:
    """Get the plot color for an ENSO phase.

    Examples:
        >>> enso_to_color("La Niña")
        'blue'
        >>> enso_to_color(None)
        '#999999'
    """
    return ENSO_COLORS.get(phase, MISSING_COLOR)


# =============================================================================
# PHASE STRENGTH COLORS
# =============================================================================

# (column, hex_color), strongest El Niño first
PHASE_STRENGTH_COLORS = [
    ("strong_el_nino", "#E31A1C"),
    ("weak_el_nino", "#FB9A99"),
    ("neutral", "#CAB2D6"),
    ("weak_la_nina", "#A6CEE3"),
    ("strong_la_nina", "#1F78B4"),
]

PCT_DIFF_COLORS = {
    "pct_diff_el_nino": "#E31A1C",
    "pct_diff_la_nina": "#1F78B4",
}
