"""Supply/demand zones and zone merging."""
from smc_trader.decision_layer import Bias, SupplyDemandPlugin, Zone, ZoneKind, ZoneStrength, merge_zones
from conftest import SYMBOL, bars_from_ohlc, newest_first

# Reversal low, then three higher closes
DEMAND = [
    (1.1030, 1.1035, 1.1015, 1.1020),
    (1.1020, 1.1022, 1.1000, 1.1010),
    (1.1010, 1.1030, 1.1008, 1.1028),
    (1.1028, 1.1050, 1.1026, 1.1048),
    (1.1048, 1.1070, 1.1046, 1.1068),
]

SUPPLY = [
    (1.1040, 1.1055, 1.1035, 1.1050),
    (1.1050, 1.1070, 1.1048, 1.1060),
    (1.1060, 1.1062, 1.1040, 1.1042),
    (1.1042, 1.1044, 1.1020, 1.1022),
    (1.1022, 1.1024, 1.1000, 1.1002),
]


def demand(lower, upper, ts, **kwargs) -> Zone:
    return Zone(kind=ZoneKind.DEMAND, timeframe="H4", upper=upper, lower=lower, formation_ts=ts, **kwargs)


class TestSupplyDemandPlugin:

    def test_demand_zone(self, provider):
        zones = SupplyDemandPlugin(SYMBOL, provider).scan(newest_first(bars_from_ohlc(DEMAND)), "H4")

        assert len(zones) == 1
        zone = zones[0]
        assert zone.kind is ZoneKind.DEMAND
        assert (zone.lower, zone.upper) == (1.1000, 1.1020)
        assert zone.strength is ZoneStrength.NORMAL
        assert zone.is_fresh and zone.is_active

    def test_supply_zone(self, provider):
        zones = SupplyDemandPlugin(SYMBOL, provider).scan(newest_first(bars_from_ohlc(SUPPLY)), "H4")

        assert [z.kind for z in zones] == [ZoneKind.SUPPLY]
        assert (zones[0].lower, zones[0].upper) == (1.1050, 1.1070)
        assert zones[0].bias is Bias.BEARISH

    def test_weak_departure_rejected(self, provider):
        rows = DEMAND[:2] + [
            (1.1010, 1.1016, 1.1008, 1.1014),
            (1.1014, 1.1018, 1.1012, 1.1012),
            (1.1012, 1.1020, 1.1010, 1.1016),
        ]
        assert SupplyDemandPlugin(SYMBOL, provider).scan(newest_first(bars_from_ohlc(rows)), "H4") == []

    def test_retest_marks_zone_tested(self, provider):
        provider.load(SYMBOL, "H4", bars_from_ohlc(DEMAND + [(1.1068, 1.1070, 1.1015, 1.1030)]))
        plugin = SupplyDemandPlugin(SYMBOL, provider)

        zone = plugin.detect("H4")[0]
        assert zone.touch_count == 1
        assert not zone.is_fresh
        assert zone.is_active
        assert plugin.is_in_relevant_zone("H4", Bias.BULLISH, price=1.1010)
        assert plugin.nearest_zone("H4", Bias.BULLISH, 1.1030) == zone
        assert plugin.nearest_zone("H4", Bias.BEARISH, 1.1030) is None

    def test_close_below_zone_breaks_it(self, provider):
        rows = DEMAND + [(1.1068, 1.1070, 1.0990, 1.0995)]
        zones = SupplyDemandPlugin(SYMBOL, provider).scan(newest_first(bars_from_ohlc(rows)), "H4")

        demand_zone = next(z for z in zones if z.kind is ZoneKind.DEMAND)
        assert demand_zone.is_broken
        assert not demand_zone.is_fresh


class TestMergeZones:

    def test_overlapping_zones_collapse(self):
        zones = [
            demand(1.1000, 1.1020, 100, strength=ZoneStrength.WEAK, touch_count=2),
            demand(1.1015, 1.1030, 200, strength=ZoneStrength.STRONG, touch_count=1),
            demand(1.1050, 1.1060, 300),
        ]
        merged = merge_zones(zones)

        assert [(z.lower, z.upper, z.formation_ts) for z in merged] == [
            (1.1050, 1.1060, 300),
            (1.1000, 1.1030, 100),
        ]
        assert merged[1].strength is ZoneStrength.STRONG
        assert merged[1].touch_count == 2

    def test_chained_overlaps_merge_into_one(self):
        zones = [
            demand(1.1020, 1.1040, 300),
            demand(1.1000, 1.1010, 100),
            demand(1.1008, 1.1022, 200),
        ]
        merged = merge_zones(zones)

        assert len(merged) == 1
        assert (merged[0].lower, merged[0].upper) == (1.1000, 1.1040)

    def test_status_flags_combine(self):
        merged = merge_zones([
            demand(1.1000, 1.1020, 100, is_fresh=False),
            demand(1.1010, 1.1030, 200, is_broken=True),
        ])
        assert not merged[0].is_fresh
        assert merged[0].is_broken

    def test_kinds_never_merge(self):
        supply = Zone(kind=ZoneKind.SUPPLY, timeframe="H4", upper=1.1030, lower=1.1010, formation_ts=150)
        merged = merge_zones([demand(1.1000, 1.1020, 100), supply])

        assert len(merged) == 2

    def test_merge_is_idempotent(self):
        zones = [
            demand(1.1000, 1.1020, 100),
            demand(1.1015, 1.1030, 200),
            demand(1.1050, 1.1060, 300),
            demand(1.1058, 1.1070, 400),
        ]
        once = merge_zones(zones)
        twice = merge_zones(once)

        assert [(z.lower, z.upper, z.formation_ts) for z in twice] == [(z.lower, z.upper, z.formation_ts) for z in once]
        assert not any(a.overlaps(b) for i, a in enumerate(once) for b in once[i + 1:])

    def test_empty(self):
        assert merge_zones([]) == []
