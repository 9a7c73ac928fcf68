"""Wyckoff event tagging and phase classification."""
import pytest

from smc_trader.decision_layer import MarketPhase, WyckoffClassifier, WyckoffEvent, WyckoffEventType
from conftest import SYMBOL, bars_from_closes, bars_from_ohlc, newest_first

FLAT = (1.1000, 1.1002, 1.0998, 1.1000)
CLIMAX_DOWN = [
    (1.1000, 1.1001, 1.0960, 1.0965),
    (1.0965, 1.0982, 1.0963, 1.0980),
    (1.0980, 1.0992, 1.0978, 1.0990),
]
SPRING = [
    (1.0999, 1.1001, 1.0990, 1.1000),
    (1.1000, 1.1004, 1.0999, 1.1003),
    (1.1003, 1.1006, 1.1001, 1.1005),
]
# Newest three bars after 60 FLAT bars: event bar, then two follow-through bars
CLIMAX_UP = [
    (1.1000, 1.1040, 1.0999, 1.1035),
    (1.1035, 1.1037, 1.1018, 1.1020),
    (1.1020, 1.1022, 1.1008, 1.1010),
]
UPTHRUST = [
    (1.1001, 1.1010, 1.0999, 1.1000),
    (1.1000, 1.1001, 1.0996, 1.0997),
    (1.0997, 1.0999, 1.0994, 1.0995),
]
BREAKOUT_UP = [
    (1.1000, 1.1006, 1.1000, 1.1005),
    (1.1005, 1.1009, 1.1004, 1.1008),
    (1.1008, 1.1011, 1.1006, 1.1010),
]
BREAKDOWN = [
    (1.1000, 1.1000, 1.0994, 1.0995),
    (1.0995, 1.0996, 1.0991, 1.0992),
    (1.0992, 1.0994, 1.0989, 1.0990),
]
# Wide bearish bar at a new low that closes back inside the range
CLIMAX_SPRING = [
    (1.1002, 1.1003, 1.0985, 1.0999),
    (1.0999, 1.1002, 1.0998, 1.1001),
    (1.1001, 1.1004, 1.1000, 1.1003),
]


def window(rows):
    return newest_first(bars_from_ohlc(rows))


def event(event_type: WyckoffEventType) -> WyckoffEvent:
    return WyckoffEvent(event_type=event_type, ts=0, price=1.1, shift=0)


@pytest.fixture
def wyckoff(provider):
    return WyckoffClassifier(SYMBOL, provider)


def test_selling_climax(wyckoff):
    events = wyckoff.detect_events(window([FLAT] * 60 + CLIMAX_DOWN))

    assert [(e.event_type, e.shift) for e in events] == [(WyckoffEventType.SELLING_CLIMAX, 2)]
    assert events[0].price == 1.0965


def test_spring_inside_trading_range(wyckoff):
    events = wyckoff.detect_events(window([FLAT] * 60 + SPRING))

    assert [e.event_type for e in events] == [WyckoffEventType.SPRING]
    assert wyckoff.classify_phase(window([FLAT] * 60 + SPRING)) is MarketPhase.MID_ACCUMULATION


def test_climax_needs_volume_spike_when_volume_present(wyckoff):
    flat = [FLAT + (100,)] * 60
    quiet = [CLIMAX_DOWN[0] + (120,)] + [row + (100,) for row in CLIMAX_DOWN[1:]]
    loud = [CLIMAX_DOWN[0] + (200,)] + [row + (100,) for row in CLIMAX_DOWN[1:]]

    assert wyckoff.detect_events(window(flat + quiet)) == []
    assert [e.event_type for e in wyckoff.detect_events(window(flat + loud))] == [WyckoffEventType.SELLING_CLIMAX]


@pytest.mark.parametrize("rows, event_type", [
    (CLIMAX_UP, WyckoffEventType.BUYING_CLIMAX),
    (UPTHRUST, WyckoffEventType.UPTHRUST),
    (BREAKOUT_UP, WyckoffEventType.SIGN_OF_STRENGTH),
    (BREAKDOWN, WyckoffEventType.SIGN_OF_WEAKNESS),
])
def test_single_event_after_flat_range(wyckoff, rows, event_type):
    events = wyckoff.detect_events(window([FLAT] * 60 + rows))

    assert [(e.event_type, e.shift) for e in events] == [(event_type, 2)]
    assert events[0].price == rows[0][3]


def test_climax_takes_priority_over_spring(wyckoff):
    events = wyckoff.detect_events(window([FLAT] * 60 + CLIMAX_SPRING))
    assert [e.event_type for e in events] == [WyckoffEventType.SELLING_CLIMAX]

    # Without the volume spike only the spring conditions hold
    flat = [FLAT + (100,)] * 60
    quiet = [CLIMAX_SPRING[0] + (120,)] + [row + (100,) for row in CLIMAX_SPRING[1:]]
    events = wyckoff.detect_events(window(flat + quiet))
    assert [e.event_type for e in events] == [WyckoffEventType.SPRING]


def test_short_window_is_unknown(wyckoff):
    bars = window([FLAT] * 30 + CLIMAX_DOWN)

    assert wyckoff.detect_events(bars) == []
    assert wyckoff.classify_phase(bars) is MarketPhase.UNKNOWN


def test_no_events_and_no_trend_is_unknown(wyckoff):
    assert wyckoff.classify_phase(window([FLAT] * 80)) is MarketPhase.UNKNOWN


def test_events_decide_phase_without_ma_history(wyckoff):
    assert wyckoff.classify_phase(window([FLAT] * 60 + CLIMAX_DOWN)) is MarketPhase.EARLY_ACCUMULATION


def test_stacked_moving_averages(wyckoff):
    rising = newest_first(bars_from_closes([1.1000 + 0.0005 * k for k in range(120)]))
    falling = newest_first(bars_from_closes([1.2000 - 0.0005 * k for k in range(120)]))

    assert wyckoff.classify_phase(rising) is MarketPhase.MARKUP
    assert wyckoff.classify_phase(falling) is MarketPhase.MARKDOWN


@pytest.mark.parametrize("types, phase", [
    ([WyckoffEventType.SELLING_CLIMAX, WyckoffEventType.SPRING, WyckoffEventType.SIGN_OF_STRENGTH],
     MarketPhase.LATE_ACCUMULATION),
    ([WyckoffEventType.SELLING_CLIMAX, WyckoffEventType.SPRING], MarketPhase.MID_ACCUMULATION),
    ([WyckoffEventType.SELLING_CLIMAX, WyckoffEventType.BUYING_CLIMAX], MarketPhase.EARLY_ACCUMULATION),
    ([WyckoffEventType.BUYING_CLIMAX, WyckoffEventType.UPTHRUST], MarketPhase.MID_DISTRIBUTION),
    ([WyckoffEventType.BUYING_CLIMAX, WyckoffEventType.SIGN_OF_WEAKNESS, WyckoffEventType.UPTHRUST],
     MarketPhase.LATE_DISTRIBUTION),
    ([WyckoffEventType.SELLING_CLIMAX, WyckoffEventType.BUYING_CLIMAX, WyckoffEventType.UPTHRUST],
     MarketPhase.MID_DISTRIBUTION),
    ([WyckoffEventType.BUYING_CLIMAX], MarketPhase.EARLY_DISTRIBUTION),
    ([], MarketPhase.UNKNOWN),
])
def test_phase_from_events(types, phase):
    assert WyckoffClassifier.phase_from_events([event(t) for t in types]) is phase


def test_phase_remembered_per_timeframe(provider, wyckoff):
    provider.load(SYMBOL, "D1", bars_from_closes([1.1000 + 0.0005 * k for k in range(120)]))

    assert wyckoff.determine_market_phase("D1") is MarketPhase.MARKUP
    assert wyckoff.last_phase == {"D1": MarketPhase.MARKUP}
