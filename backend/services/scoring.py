"""WACE ATAR scoring engine.

Pure functions only: the caller supplies resolved selection entries and gets
back a ScoreResult. Nothing here reads the catalog, the store or settings.

Pipeline:
1. Scale every entry (raw * factor, rounded to 2 dp)
2. Rank by scaled score, stable on ties
3. Sum the top 4
4. Add 10% of every mathematics entry (any rank)
5. Add 10% of every language entry (any rank)
6. Normalise against 400 plus 10 per bonus match
7. Dampen, clamp to [0, 99.95], round to 2 dp
"""

import logging
import math
from collections.abc import Sequence

from models.responses import BonusContribution, RankedSubject, ScoreResult
from models.schemas.subject import SelectionEntry, YearLevel

logger = logging.getLogger(__name__)

MIN_ENTRIES = 4
TOP_N = 4
BASE_MAX_AGGREGATE = 400.0
BONUS_RATE = 0.1
BONUS_MAX_INCREMENT = 10.0
DAMPING = 0.9995
ATAR_CEILING = 99.95

_ROUND2_EXACT_ABOVE = 2**52 / 100

BONUS_SUBJECT_NAMES = frozenset({"Mathematics Methods", "Mathematics Specialist"})
LANGUAGE_CATEGORY = "Languages"

_EARLY_STAGE_RECOMMENDATIONS = [
    "Consider Mathematics Methods or Specialist for strong scaling",
    "Choose at least one science (Physics/Chemistry scale best)",
    "English ATAR or Literature is required",
    "Select subjects you enjoy and can perform well in",
]

_TERMINAL_STAGE_RECOMMENDATIONS = [
    "You need at least 4 ATAR subjects",
    "Top 4 subjects count toward your ATAR",
    "Mathematics and LOTE subjects receive 10% bonus points",
    "Focus on maintaining strong raw scores",
]


def round2(value: float) -> float:
    """Round to 2 dp: multiply by 100, round half away from zero, divide by 100."""
    # From here on value * 100 is already integral, and can overflow
    if not math.isfinite(value) or abs(value) >= _ROUND2_EXACT_ABOVE:
        return value
    return math.copysign(math.floor(abs(value) * 100 + 0.5), value) / 100


def scaled_score(raw_score: float, scaling_factor: float) -> float:
    return round2(raw_score * scaling_factor)


def is_mathematics_bonus(entry: SelectionEntry) -> bool:
    return entry.subject.name in BONUS_SUBJECT_NAMES


def is_language_bonus(entry: SelectionEntry) -> bool:
    return entry.subject.category == LANGUAGE_CATEGORY


def compute_aggregate(entries: Sequence[SelectionEntry]) -> ScoreResult:
    """Compute the predicted ATAR for a selection.

    Fewer than MIN_ENTRIES entries yields the zero result rather than an
    error; callers that need to tell "not enough subjects" apart from a real
    score must check the entry count themselves.
    """
    if len(entries) < MIN_ENTRIES:
        return ScoreResult()

    scored = [
        (entry, scaled_score(entry.raw_score, entry.subject.scaling_factor))
        for entry in entries
    ]
    # sorted() is stable with reverse=True, so equal scores keep input order
    ranked = sorted(scored, key=lambda pair: pair[1], reverse=True)
    top = ranked[:TOP_N]
    aggregate = sum(scaled for _, scaled in top)

    bonuses: list[BonusContribution] = []
    for entry, scaled in scored:
        if is_mathematics_bonus(entry):
            bonuses.append(_bonus(entry, scaled, "mathematics"))
    for entry, scaled in scored:
        if is_language_bonus(entry):
            bonuses.append(_bonus(entry, scaled, "languages"))

    aggregate += sum(b.bonus for b in bonuses)
    # An entry matching both rules inflates the maximum twice
    max_aggregate = BASE_MAX_AGGREGATE + BONUS_MAX_INCREMENT * len(bonuses)
    percentile = aggregate / max_aggregate * 100

    atar = min(ATAR_CEILING, max(0.0, percentile * DAMPING))
    atar = round2(atar)

    logger.debug(
        "ATAR computed: entries=%d aggregate=%.2f max=%.0f atar=%.2f",
        len(entries), aggregate, max_aggregate, atar,
    )

    return ScoreResult(
        atar=atar,
        top_four=[
            RankedSubject(subject=entry.subject, raw_score=entry.raw_score, scaled_score=scaled)
            for entry, scaled in top
        ],
        bonuses=bonuses,
    )


def flagged_bonus_entries(entries: Sequence[SelectionEntry]) -> list[BonusContribution]:
    """Entries whose subject carries the `has_bonus` display flag.

    Display only. The aggregate uses the name/category rules above, and the
    two can disagree for a given catalog row.
    """
    flagged = []
    for entry in entries:
        if entry.subject.has_bonus:
            scaled = scaled_score(entry.raw_score, entry.subject.scaling_factor)
            flagged.append(_bonus(entry, scaled, "flagged"))
    return flagged


def recommendations_for(year_level: YearLevel | str) -> list[str]:
    if year_level == YearLevel.YEAR_10:
        return list(_EARLY_STAGE_RECOMMENDATIONS)
    return list(_TERMINAL_STAGE_RECOMMENDATIONS)


def _bonus(entry: SelectionEntry, scaled: float, rule: str) -> BonusContribution:
    return BonusContribution(
        subject=entry.subject,
        rule=rule,
        scaled_score=scaled,
        bonus=scaled * BONUS_RATE,
    )
