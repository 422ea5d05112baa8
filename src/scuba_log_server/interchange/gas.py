"""Gas mix fractions for the breathing gas categories.

UDDF describes gases by O2/He fractions while records store a category, so
export looks fractions up by category and import classifies fractions back
into the nearest category.
"""

from dataclasses import dataclass

from scuba_log_server.interchange.record import GasMixture

O2_TOLERANCE = 0.02
HELIUM_THRESHOLD = 0.01
AIR_O2 = 0.21


@dataclass(frozen=True)
class GasFractions:
    """O2/He composition; N2 is whatever remains."""

    o2: float
    he: float = 0.0

    @property
    def n2(self) -> float:
        return round(max(0.0, 1.0 - self.o2 - self.he), 4)


MIX_FRACTIONS: dict[GasMixture, GasFractions] = {
    GasMixture.AIR: GasFractions(o2=0.21),
    GasMixture.EANX32: GasFractions(o2=0.32),
    GasMixture.EANX36: GasFractions(o2=0.36),
    GasMixture.EANX40: GasFractions(o2=0.40),
    GasMixture.ENRICHED: GasFractions(o2=0.50),
    GasMixture.TRIMIX: GasFractions(o2=0.21, he=0.35),
    GasMixture.REBREATHER: GasFractions(o2=1.0),
}

MIX_NAMES: dict[GasMixture, str] = {
    GasMixture.AIR: "Air",
    GasMixture.EANX32: "EANx32",
    GasMixture.EANX36: "EANx36",
    GasMixture.EANX40: "EANx40",
    GasMixture.ENRICHED: "Enriched Air",
    GasMixture.TRIMIX: "Trimix",
    GasMixture.REBREATHER: "Rebreather",
}

# Helium-free categories matched by O2 fraction, checked in this order.
_NITROX_CATEGORIES = (
    GasMixture.AIR,
    GasMixture.EANX32,
    GasMixture.EANX36,
    GasMixture.EANX40,
    GasMixture.ENRICHED,
    GasMixture.REBREATHER,
)


def fractions_for(mixture: GasMixture) -> GasFractions:
    return MIX_FRACTIONS[mixture]


def classify_mix(o2: float, he: float = 0.0) -> GasMixture:
    """Classify a composition into a gas category.

    Any helium above the threshold is trimix. Otherwise the O2 fraction is
    matched within tolerance; an unmatched composition richer than air is
    ``enriched`` and anything else falls back to ``air``.
    """
    if he > HELIUM_THRESHOLD:
        return GasMixture.TRIMIX
    for mixture in _NITROX_CATEGORIES:
        if abs(o2 - MIX_FRACTIONS[mixture].o2) <= O2_TOLERANCE:
            return mixture
    if o2 > AIR_O2 + O2_TOLERANCE:
        return GasMixture.ENRICHED
    return GasMixture.AIR
