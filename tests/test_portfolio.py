import pytest

from rsicv.backtest import PositionState, PositionTracker, Trade, compound_trades


def _trade(pct: float, start: int = 0) -> Trade:
    return Trade(
        buy_time=start,
        sell_time=start + 60,
        buy_price=100.0,
        sell_price=100.0 * (1 + pct / 100),
        percentage_change=pct,
    )


def test_tracker_transitions_between_flat_and_holding():
    tracker = PositionTracker()
    assert tracker.state is PositionState.FLAT

    tracker.open(10, 50.0)
    assert tracker.state is PositionState.HOLDING
    assert tracker.position.price == 50.0

    trade = tracker.close(20, 55.0)
    assert tracker.state is PositionState.FLAT
    assert tracker.position is None
    assert trade.buy_time == 10
    assert trade.sell_time == 20
    assert trade.percentage_change == pytest.approx(10.0)


def test_tracker_rejects_pyramiding_and_closing_while_flat():
    tracker = PositionTracker()
    with pytest.raises(RuntimeError):
        tracker.close(5, 1.0)

    tracker.open(10, 50.0)
    with pytest.raises(RuntimeError):
        tracker.open(11, 49.0)


def test_tracker_requires_sell_after_buy():
    tracker = PositionTracker()
    tracker.open(10, 50.0)

    with pytest.raises(RuntimeError):
        tracker.close(10, 51.0)


def test_compound_trades_reinvests_full_balance():
    trades = [_trade(10.0), _trade(-5.0, 100), _trade(20.0, 200)]

    result = compound_trades(trades)

    assert result.initial_investment == 1000.0
    assert result.final_value == pytest.approx(1000 * 1.1 * 0.95 * 1.2)
    assert result.total_percentage_change == pytest.approx(25.4)
    assert result.equity_curve() == pytest.approx([1000.0, 1100.0, 1045.0, 1254.0])


def test_compound_trades_without_trades_is_flat():
    result = compound_trades([])

    assert result.final_value == 1000.0
    assert result.total_percentage_change == 0.0
    assert result.trades == []


def test_trade_label_formats_sign():
    assert _trade(12.345).label() == "+12.35%"
    assert _trade(-3.0).label() == "-3.00%"
