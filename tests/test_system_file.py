from datetime import date

import pytest

from core.errors import ConfigurationError, DependencyError
from system_file.builder import build_system, parse_system, read_system_file
from system_file.loader import load_system_file

START = date(2024, 1, 1)


def _build(text, write_system):
    return read_system_file(write_system(text), today=START)


class TestSystem1:
    def test_sections(self, system1):
        assert list(system1.accounts) == ["A", "B", "C", "price", "options"]
        assert list(system1.account_groups) == ["Group1", "Group2", "Group3"]
        assert list(system1.trajectories) == ["net worth", "company"]
        assert [p.file_name for p in system1.plots] == ["all_values.svg", "total_value.svg", "liquid.svg"]

    def test_accounts_are_shared_between_groups(self, system1):
        groups = system1.account_groups
        a = system1.accounts["A"]
        assert groups["Group1"].accounts[0] is a
        assert groups["Group2"].accounts[0] is a
        assert groups["Group3"].accounts[0] is a

    def test_updates(self, system1):
        a = system1.accounts["A"]
        weekly, monthly = a.updates
        assert (weekly.value_change, weekly.recurrence, weekly.day) == (1200.0, "weekly", 5)
        assert weekly.target_account is None
        assert (monthly.value_change, monthly.recurrence, monthly.day) == (-2600.0, "monthly", 3)
        assert monthly.target_account is system1.accounts["C"]

    def test_share_price_account(self, system1):
        options = system1.accounts["options"]
        assert options.share_price is system1.accounts["price"]
        assert options.num_shares == 100.0
        assert options.strike_price == 20.0
        assert options.value == 500.0

    def test_trajectory_dates(self, system1):
        net_worth = system1.trajectories["net worth"]
        assert net_worth.start_date == START
        assert net_worth.stop_date == date(2025, 1, 1)
        assert net_worth.account_group is system1.account_groups["Group3"]

    def test_simulate_all(self, system1):
        tables = system1.simulate_all()
        assert set(tables) == {"net worth", "company"}
        assert len(tables["net worth"]) == 367
        assert len(tables["company"]) == 732


class TestBuild:
    def test_default_dates(self, write_system):
        system = _build("""
            accounts:
              - name: A
                value: 1
            account_groups:
              - name: G
                accounts: [A]
            trajectories:
              - name: T
                account_group: G
        """, write_system)
        traj = system.trajectories["T"]
        assert traj.start_date == START
        assert traj.stop_date == date(2044, 1, 1)

    def test_explicit_start_date(self, write_system):
        system = _build("""
            accounts:
              - name: A
            account_groups:
              - name: G
                accounts: [A]
            trajectories:
              - name: T
                account_group: G
                start_date: 2030-06-01
                stop_date: 2030-07-01
        """, write_system)
        assert system.trajectories["T"].start_date == date(2030, 6, 1)
        assert system.accounts["A"].value == 0.0

    def test_once_takes_a_yaml_date(self, write_system):
        system = _build("""
            accounts:
              - name: A
                updates:
                  - value_change: 5
                    recurrence: once
                    day: 2024-06-15
                  - value_change: 6
                    recurrence: once
                    day: "2024-07-01"
        """, write_system)
        first, second = system.accounts["A"].updates
        assert first.next_date == date(2024, 6, 15)
        assert second.next_date == date(2024, 7, 1)

    def test_weekday_forms(self, write_system):
        system = _build("""
            accounts:
              - name: A
                updates:
                  - {value_change: 1, recurrence: weekly, day: fri}
                  - {value_change: 1, recurrence: biweekly, day: 3}
                  - {value_change: 1, recurrence: weekly, day: SUNDAY}
                  - {value_change: 1, recurrence: daily}
        """, write_system)
        assert [u.day for u in system.accounts["A"].updates] == [5, 3, 7, 0]

    def test_numeric_names_become_text(self, write_system):
        system = _build("""
            accounts:
              - name: 401
                value: 3
            account_groups:
              - name: retirement
                accounts: [401]
        """, write_system)
        assert list(system.accounts) == ["401"]
        assert system.account_groups["retirement"].account_names == ["401"]

    def test_empty_sections(self, write_system):
        system = _build("""
            accounts:
            account_groups:
        """, write_system)
        assert system.accounts == {}
        assert system.trajectories == {}

    def test_build_from_mapping(self):
        system = build_system({"accounts": [{"name": "A", "value": 2}]}, today=START)
        assert system.accounts["A"].value == 2.0

    def test_parse_system_only_checks_shape(self):
        spec = parse_system({"account_groups": [{"name": "G", "accounts": ["missing"]}]})
        assert spec.account_groups[0].accounts == ["missing"]


class TestBuildErrors:
    def test_unknown_group_account(self, write_system):
        with pytest.raises(ConfigurationError, match=r"account group 'G'.*unknown accounts \['Z'\]"):
            _build("""
                accounts:
                  - name: A
                account_groups:
                  - name: G
                    accounts: [A, Z]
            """, write_system)

    def test_unknown_trajectory_group(self, write_system):
        with pytest.raises(ConfigurationError, match="trajectory 'T'.*unknown account_group 'nope'"):
            _build("""
                trajectories:
                  - name: T
                    account_group: nope
            """, write_system)

    def test_unknown_transfer_target(self, write_system):
        with pytest.raises(ConfigurationError) as info:
            _build("""
                accounts:
                  - name: A
                    updates:
                      - value_change: -1
                        recurrence: daily
                        transfer_to: Z
            """, write_system)
        assert info.value.entity == "account 'A' update #1"
        assert "unknown account 'Z'" in str(info.value)

    def test_missing_day(self, write_system):
        with pytest.raises(ConfigurationError, match='"day" is required') as info:
            _build("""
                accounts:
                  - name: A
                    updates:
                      - value_change: 1
                        recurrence: monthly
            """, write_system)
        assert info.value.entity == "account 'A'"

    def test_once_without_day(self, write_system):
        with pytest.raises(ConfigurationError, match='"day" is required'):
            _build("""
                accounts:
                  - name: A
                    updates:
                      - value_change: 1
                        recurrence: once
            """, write_system)

    def test_unknown_recurrence(self, write_system):
        with pytest.raises(ConfigurationError, match="recurrence"):
            _build("""
                accounts:
                  - name: A
                    updates:
                      - value_change: 1
                        recurrence: fortnightly
                        day: 1
            """, write_system)

    @pytest.mark.parametrize("recurrence, day", [
        ("weekly", "Funday"),
        ("weekly", 8),
        ("monthly", 32),
        ("monthly", 0),
        ("yearly", 367),
        ("once", "tomorrow"),
    ])
    def test_bad_day(self, write_system, recurrence, day):
        with pytest.raises(ConfigurationError) as info:
            _build(f"""
                accounts:
                  - name: A
                    updates:
                      - value_change: 1
                        recurrence: {recurrence}
                        day: {day}
            """, write_system)
        assert info.value.entity == "account 'A' update #1"

    def test_unknown_field(self, write_system):
        with pytest.raises(ConfigurationError, match="interest"):
            _build("""
                accounts:
                  - name: A
                    interest: 0.1
            """, write_system)

    def test_unknown_share_price(self, write_system):
        with pytest.raises(ConfigurationError, match="unknown account 'ghost'"):
            _build("""
                accounts:
                  - name: opt
                    share_price: ghost
                    num_shares: 1
            """, write_system)

    def test_share_price_chain(self, write_system):
        with pytest.raises(DependencyError, match="opt2"):
            _build("""
                accounts:
                  - name: price
                    value: 10
                  - name: opt
                    share_price: price
                    num_shares: 1
                  - name: opt2
                    share_price: opt
                    num_shares: 1
            """, write_system)

    def test_growth_with_share_price(self, write_system):
        with pytest.raises(ConfigurationError, match="growth_rate cannot be combined"):
            _build("""
                accounts:
                  - name: price
                  - name: opt
                    share_price: price
                    num_shares: 1
                    growth_rate: 0.1
            """, write_system)

    def test_share_price_needs_num_shares(self, write_system):
        with pytest.raises(ConfigurationError, match="num_shares is required"):
            _build("""
                accounts:
                  - name: price
                  - name: opt
                    share_price: price
            """, write_system)

    def test_duplicate_names(self, write_system):
        with pytest.raises(ConfigurationError, match=r"duplicate names in accounts: \['A'\]"):
            _build("""
                accounts:
                  - name: A
                  - name: A
            """, write_system)

    def test_reserved_name(self, write_system):
        with pytest.raises(ConfigurationError, match="reserved"):
            _build("""
                accounts:
                  - name: total
            """, write_system)

    def test_stop_before_start(self, write_system):
        with pytest.raises(ConfigurationError, match="before start_date"):
            _build("""
                accounts:
                  - name: A
                account_groups:
                  - name: G
                    accounts: [A]
                trajectories:
                  - name: T
                    account_group: G
                    stop_date: 2023-01-01
            """, write_system)

    def test_plot_unknown_trajectory(self, write_system):
        with pytest.raises(ConfigurationError, match="plot 'p.svg'.*unknown trajectory"):
            _build("""
                plots:
                  - file_name: p.svg
                    trajectory: nope
            """, write_system)

    def test_plot_account_outside_trajectory(self, write_system):
        with pytest.raises(ConfigurationError, match=r"accounts \['B'\] are not in trajectory 'T'"):
            _build("""
                accounts:
                  - name: A
                  - name: B
                account_groups:
                  - name: G
                    accounts: [A]
                trajectories:
                  - name: T
                    account_group: G
                    stop_date: 2025-01-01
                plots:
                  - file_name: p.svg
                    trajectory: T
                    account_sums:
                      - sum_name: both
                        account_names: [A, B]
            """, write_system)


class TestLoader:
    def test_empty_file(self, write_system):
        assert load_system_file(write_system("")) == {}

    def test_top_level_list(self, write_system):
        with pytest.raises(ValueError, match="mapping"):
            load_system_file(write_system("- a\n- b\n"))
