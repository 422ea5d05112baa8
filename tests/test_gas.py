"""Tests for gas mix classification."""

import pytest

from scuba_log_server.interchange.gas import MIX_FRACTIONS, classify_mix, fractions_for
from scuba_log_server.interchange.record import GasMixture


class TestFractions:
    def test_nitrogen_is_the_remainder(self) -> None:
        eanx32 = fractions_for(GasMixture.EANX32)
        assert eanx32.o2 == 0.32
        assert eanx32.he == 0.0
        assert eanx32.n2 == pytest.approx(0.68)

    def test_trimix_fractions(self) -> None:
        trimix = fractions_for(GasMixture.TRIMIX)
        assert trimix.he == 0.35
        assert trimix.n2 == pytest.approx(0.44)

    def test_rebreather_has_no_nitrogen(self) -> None:
        assert fractions_for(GasMixture.REBREATHER).n2 == 0.0

    def test_every_category_has_fractions(self) -> None:
        assert set(MIX_FRACTIONS) == set(GasMixture)


class TestClassifyMix:
    @pytest.mark.parametrize("mixture", list(GasMixture))
    def test_category_fractions_classify_back(self, mixture: GasMixture) -> None:
        fractions = fractions_for(mixture)
        assert classify_mix(fractions.o2, fractions.he) is mixture

    def test_close_o2_matches_within_tolerance(self) -> None:
        assert classify_mix(0.31) is GasMixture.EANX32
        assert classify_mix(0.22) is GasMixture.AIR
        assert classify_mix(0.37) is GasMixture.EANX36

    def test_any_helium_is_trimix(self) -> None:
        assert classify_mix(0.18, 0.45) is GasMixture.TRIMIX
        assert classify_mix(0.32, 0.02) is GasMixture.TRIMIX

    def test_trace_helium_ignored(self) -> None:
        assert classify_mix(0.32, 0.005) is GasMixture.EANX32

    def test_unmatched_rich_mix_is_enriched(self) -> None:
        assert classify_mix(0.28) is GasMixture.ENRICHED
        assert classify_mix(0.80) is GasMixture.ENRICHED

    def test_lean_mix_falls_back_to_air(self) -> None:
        assert classify_mix(0.10) is GasMixture.AIR
        assert classify_mix(0.0) is GasMixture.AIR
