from datetime import date

import pytest

from accounts.models import Account, AccountUpdate
from core.errors import DependencyError
from engine.valuation import get_next_value, order_accounts

DAY = date(2024, 1, 5)


def _fires_on(value_change, day=DAY, target=None):
    u = AccountUpdate.from_day(value_change, "weekly", "Friday", target_account=target)
    u.next_date = day
    return u


class TestOrderAccounts:
    def test_dependents_go_last_in_declared_order(self):
        price = Account("price", 10.0, 0.05)
        opt1 = Account.derived("opt1", price, 10)
        bank = Account("bank", 1.0)
        opt2 = Account.derived("opt2", price, 5)
        ordered = order_accounts([opt1, price, opt2, bank])
        assert [a.name for a in ordered] == ["price", "bank", "opt1", "opt2"]

    def test_source_missing_from_group(self):
        price = Account("price", 10.0)
        opt = Account.derived("opt", price, 10)
        with pytest.raises(DependencyError, match="not in the simulated group"):
            order_accounts([opt])

    def test_chain_is_rejected(self):
        price = Account("price", 10.0)
        opt = Account.derived("opt", price, 10)
        opt_on_opt = Account.derived("opt2", opt, 1)
        with pytest.raises(DependencyError, match="itself a share-price account"):
            order_accounts([price, opt, opt_on_opt])

    def test_self_reference_is_rejected(self):
        a = Account("a", 1.0)
        a.share_price = a
        with pytest.raises(DependencyError, match="itself"):
            order_accounts([a])


class TestGetNextValue:
    def test_carry_forward(self):
        value, transfers = get_next_value(DAY, Account("bank", 100.0), 123.0)
        assert value == 123.0
        assert transfers == {}

    def test_daily_compounding(self):
        a = Account("b", 50000.0, 0.08)
        value, _ = get_next_value(DAY, a, 1000.0)
        assert value == pytest.approx(1000.0 * 1.08 ** (1 / 365))

    def test_days_per_year_setting(self):
        a = Account("b", 50000.0, 0.08)
        value, _ = get_next_value(DAY, a, 1000.0, days_per_year=360.0)
        assert value == pytest.approx(1000.0 * 1.08 ** (1 / 360))

    def test_share_price(self):
        price = Account("price", 25.0)
        opt = Account.derived("opt", price, num_shares=100, strike_price=20.0)
        value, _ = get_next_value(DAY, opt, 500.0, share_price=27.5)
        assert value == pytest.approx(750.0)

    def test_share_price_value_required(self):
        opt = Account.derived("opt", Account("price", 25.0), 100)
        with pytest.raises(DependencyError):
            get_next_value(DAY, opt, 500.0)

    def test_update_fires_and_reschedules(self):
        u = _fires_on(1200)
        a = Account("a", 0.0, updates=[u])
        value, _ = get_next_value(DAY, a, 10000.0)
        assert value == 11200.0
        assert u.next_date == date(2024, 1, 12)

    def test_update_not_due(self):
        u = _fires_on(1200, day=date(2024, 1, 12))
        a = Account("a", 0.0, updates=[u])
        value, _ = get_next_value(DAY, a, 10000.0)
        assert value == 10000.0
        assert u.next_date == date(2024, 1, 12)

    def test_update_added_after_growth(self):
        a = Account("a", 0.0, 0.1, updates=[_fires_on(50)])
        value, _ = get_next_value(DAY, a, 1000.0)
        assert value == pytest.approx(1000.0 * 1.1 ** (1 / 365) + 50)

    def test_transfer_credits_target_with_opposite_amount(self):
        c = Account("c", 0.0)
        a = Account("a", 0.0, updates=[_fires_on(-2600, target=c)])
        value, transfers = get_next_value(DAY, a, 10000.0)
        assert value == 7400.0
        assert dict(transfers) == {c: 2600.0}

    def test_transfers_to_same_target_accumulate(self):
        c = Account("c", 0.0)
        d = Account("d", 0.0)
        a = Account("a", 0.0, updates=[
            _fires_on(-100, target=c),
            _fires_on(-50, target=c),
            _fires_on(25, target=d),
        ])
        value, transfers = get_next_value(DAY, a, 1000.0)
        assert value == 875.0
        assert dict(transfers) == {c: 150.0, d: -25.0}

    def test_once_is_not_rescheduled(self):
        u = AccountUpdate.from_day(500, "once", DAY)
        a = Account("a", 0.0, updates=[u])
        fired, _ = get_next_value(DAY, a, 0.0)
        later, _ = get_next_value(date(2024, 1, 6), a, fired)
        assert fired == 500.0
        assert later == 500.0
        assert u.next_date == DAY
