from __future__ import annotations

import pytest

from impostofacil.simulator.models import ClientProfile, RevenueBracket
from impostofacil.simulator.options import (
    REGIME_OPTIONS,
    SECTOR_OPTIONS,
    STATE_OPTIONS,
    derive_revenue_bracket,
    format_brl,
    pct_b2b_to_client_profile,
    round_half_up,
)


class TestFormatting:
    @pytest.mark.parametrize(
        "value, expected",
        [(0, "0"), (999, "999"), (1000, "1.000"), (290_250, "290.250"), (1_234_567.4, "1.234.567"), (-6900, "-6.900")],
    )
    def test_format_brl(self, value, expected):
        assert format_brl(value) == expected

    @pytest.mark.parametrize("value, expected", [(2.5, 3), (-2.5, -2), (43_406.25, 43_406), (0.49, 0)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestBrackets:
    @pytest.mark.parametrize(
        "amount, bracket",
        [
            (0, RevenueBracket.MEI),
            (81_000, RevenueBracket.MEI),
            (81_000.01, RevenueBracket.ME),
            (360_000, RevenueBracket.ME),
            (4_800_000, RevenueBracket.EPP),
            (78_000_000, RevenueBracket.MEDIUM),
            (78_000_001, RevenueBracket.LARGE),
        ],
    )
    def test_derive_revenue_bracket(self, amount, bracket):
        assert derive_revenue_bracket(amount) is bracket

    @pytest.mark.parametrize(
        "pct, profile",
        [(None, ClientProfile.MIXED), (70, ClientProfile.B2B), (30, ClientProfile.B2C), (50, ClientProfile.MIXED)],
    )
    def test_pct_b2b_to_client_profile(self, pct, profile):
        assert pct_b2b_to_client_profile(pct) is profile


class TestOptionLists:
    def test_lists_cover_the_enums(self):
        assert len(SECTOR_OPTIONS) == 10
        assert len(STATE_OPTIONS) == 27
        assert [option["value"] for option in REGIME_OPTIONS][-1] == "nao_sei"
