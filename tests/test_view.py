"""Tests de filtros, ordenamiento y agrupación temporal."""

from datetime import date

import pytest

from reports.view import (
    DateAxis,
    EmptyState,
    SortConfig,
    SortDirection,
    SortKey,
    StatusFilter,
    ViewFilters,
    bucket_of,
    bucket_reservations,
    build_view,
    clear_filters,
    filter_reservations,
    sort_reservations,
    toggle_sort,
    week_start,
)

# Miércoles
TODAY = date(2024, 3, 13)


def ids(reservations):
    return [r.id for r in reservations]


class TestFilters:
    def test_inclusive_range_on_travel_date(self, make_reservation):
        rs = [
            make_reservation(id="a", travel_date=date(2024, 1, 1)),
            make_reservation(id="b", travel_date=date(2024, 1, 31)),
            make_reservation(id="c", travel_date=date(2024, 2, 1)),
            make_reservation(id="d", travel_date=date(2023, 12, 31)),
        ]
        f = ViewFilters(date_from=date(2024, 1, 1), date_to=date(2024, 1, 31))
        assert ids(filter_reservations(rs, f)) == ["a", "b"]

    def test_open_bounds(self, make_reservation):
        rs = [
            make_reservation(id="a", travel_date=date(2024, 1, 1)),
            make_reservation(id="b", travel_date=date(2024, 6, 1)),
        ]
        assert ids(filter_reservations(rs, ViewFilters(date_from=date(2024, 3, 1)))) == ["b"]
        assert ids(filter_reservations(rs, ViewFilters(date_to=date(2024, 3, 1)))) == ["a"]

    def test_creation_axis(self, make_reservation):
        rs = [
            make_reservation(id="a", created=date(2024, 1, 10), travel_date=date(2024, 5, 1)),
            make_reservation(id="b", created=date(2024, 2, 10), travel_date=date(2024, 1, 15)),
        ]
        f = ViewFilters(date_from=date(2024, 1, 1), date_to=date(2024, 1, 31), date_axis=DateAxis.CREATION)
        assert ids(filter_reservations(rs, f)) == ["a"]

    def test_missing_date_excluded_from_bounded_range(self, make_reservation):
        rs = [make_reservation(id="a", travel_date=None)]
        assert filter_reservations(rs, ViewFilters(date_from=date(2024, 1, 1))) == []
        assert ids(filter_reservations(rs, ViewFilters())) == ["a"]

    def test_text_search_or_semantics(self, make_reservation):
        rs = [
            make_reservation(id="a", holder="ACME Corp", operator="X", destination="Y"),
            make_reservation(id="b", holder="Z", operator="acme tours", destination="Y"),
            make_reservation(id="c", holder="Z", operator="X", destination="Acmetown"),
            make_reservation(id="d", holder="Z", operator="X", destination="Y"),
        ]
        assert ids(filter_reservations(rs, ViewFilters(search="Acme"))) == ["a", "b", "c"]

    def test_status_filter(self, make_reservation):
        done = make_reservation(id="done", client_payments=[1000], voucher_sent=True)
        open_ = make_reservation(id="open")
        assert ids(filter_reservations([done, open_], ViewFilters(status=StatusFilter.COMPLETED))) == ["done"]
        assert ids(filter_reservations([done, open_], ViewFilters(status=StatusFilter.PENDING))) == ["open"]
        assert ids(filter_reservations([done, open_], ViewFilters(status=StatusFilter.ALL))) == ["done", "open"]

    def test_and_composition(self, make_reservation):
        rs = [
            make_reservation(id="ok", operator="Acme", travel_date=date(2024, 1, 15),
                             client_payments=[1000], voucher_sent=True),
            make_reservation(id="out_of_range", operator="Acme", travel_date=date(2024, 2, 15),
                             client_payments=[1000], voucher_sent=True),
            make_reservation(id="pending", operator="Acme", travel_date=date(2024, 1, 15)),
            make_reservation(id="other", operator="Sol", travel_date=date(2024, 1, 15),
                             client_payments=[1000], voucher_sent=True),
        ]
        f = ViewFilters(date_from=date(2024, 1, 1), date_to=date(2024, 1, 31),
                        status=StatusFilter.COMPLETED, search="acme")
        assert ids(filter_reservations(rs, f)) == ["ok"]


class TestSorting:
    def test_tri_state_toggle(self):
        cfg = toggle_sort(SortConfig(), SortKey.DESTINATION)
        assert cfg == SortConfig(SortKey.DESTINATION, SortDirection.ASC)
        cfg = toggle_sort(cfg, SortKey.DESTINATION)
        assert cfg == SortConfig(SortKey.DESTINATION, SortDirection.DESC)
        cfg = toggle_sort(cfg, SortKey.DESTINATION)
        assert cfg == SortConfig()
        assert not cfg.active

    def test_other_key_resets_to_ascending(self):
        cfg = SortConfig(SortKey.HOLDER, SortDirection.DESC)
        assert toggle_sort(cfg, SortKey.OPERATOR) == SortConfig(SortKey.OPERATOR, SortDirection.ASC)

    def test_destination_cycle_restores_input_order(self, make_reservation):
        rs = [
            make_reservation(id="1", destination="mendoza"),
            make_reservation(id="2", destination="Bariloche"),
            make_reservation(id="3", destination="córdoba"),
            make_reservation(id="4", destination="bariloche"),
        ]
        cfg = toggle_sort(SortConfig(), SortKey.DESTINATION)
        assert ids(sort_reservations(rs, cfg)) == ["2", "4", "3", "1"]
        cfg = toggle_sort(cfg, SortKey.DESTINATION)
        assert ids(sort_reservations(rs, cfg)) == ["1", "3", "2", "4"]
        cfg = toggle_sort(cfg, SortKey.DESTINATION)
        assert ids(sort_reservations(rs, cfg)) == ["1", "2", "3", "4"]

    def test_sort_by_client_balance(self, make_reservation):
        rs = [
            make_reservation(id="a", client_payments=[100]),
            make_reservation(id="b", client_payments=[900]),
            make_reservation(id="c", client_payments=[1200]),
        ]
        cfg = SortConfig(SortKey.CLIENT_BALANCE, SortDirection.ASC)
        assert ids(sort_reservations(rs, cfg)) == ["c", "b", "a"]

    def test_sort_by_supplier_balance_desc(self, make_reservation):
        rs = [
            make_reservation(id="a", net_price=100),
            make_reservation(id="b", net_price=None),
            make_reservation(id="c", net_price=500),
        ]
        cfg = SortConfig(SortKey.SUPPLIER_BALANCE, SortDirection.DESC)
        assert ids(sort_reservations(rs, cfg)) == ["c", "a", "b"]

    def test_sort_by_dates(self, make_reservation):
        rs = [
            make_reservation(id="a", created=date(2024, 1, 3), travel_date=date(2024, 5, 1)),
            make_reservation(id="b", created=date(2024, 1, 1), travel_date=date(2024, 6, 1)),
            make_reservation(id="c", created=date(2024, 1, 2), travel_date=date(2024, 4, 1)),
        ]
        assert ids(sort_reservations(rs, SortConfig(SortKey.CREATED, SortDirection.ASC))) == ["b", "c", "a"]
        assert ids(sort_reservations(rs, SortConfig(SortKey.TRAVEL, SortDirection.DESC))) == ["b", "a", "c"]

    def test_ties_keep_input_order(self, make_reservation):
        rs = [make_reservation(id=str(i), holder="Ana") for i in range(5)]
        for direction in (SortDirection.ASC, SortDirection.DESC):
            assert ids(sort_reservations(rs, SortConfig(SortKey.HOLDER, direction))) == ["0", "1", "2", "3", "4"]

    def test_filter_and_sort_idempotent(self, make_reservation):
        rs = [
            make_reservation(id="a", holder="Zoe", operator="Acme"),
            make_reservation(id="b", holder="ana", operator="Acme"),
            make_reservation(id="c", holder="Luis", operator="Sol"),
        ]
        f = ViewFilters(search="acme")
        cfg = SortConfig(SortKey.HOLDER, SortDirection.ASC)
        once = sort_reservations(filter_reservations(rs, f), cfg)
        twice = sort_reservations(filter_reservations(once, f), cfg)
        assert ids(once) == ids(twice) == ["b", "a"]


class TestBuckets:
    def test_week_start_is_monday(self):
        assert week_start(date(2024, 3, 13)) == date(2024, 3, 11)
        assert week_start(date(2024, 3, 11)) == date(2024, 3, 11)
        # Domingo: seis días después del lunes anterior
        assert week_start(date(2024, 3, 17)) == date(2024, 3, 11)

    @pytest.mark.parametrize("created,bucket", [
        (date(2024, 3, 13), "today"),
        (date(2024, 3, 12), "yesterday"),
        (date(2024, 3, 11), "week"),
        (date(2024, 3, 10), "earlier"),
        (None, "earlier"),
    ])
    def test_bucket_of(self, created, bucket):
        assert bucket_of(created, TODAY) == bucket

    def test_yesterday_on_sunday_when_today_is_monday(self):
        monday = date(2024, 3, 18)
        assert bucket_of(date(2024, 3, 17), monday) == "yesterday"

    def test_yesterday_when_today_is_sunday(self):
        sunday = date(2024, 3, 17)
        assert bucket_of(date(2024, 3, 16), sunday) == "yesterday"
        assert bucket_of(date(2024, 3, 11), sunday) == "week"
        assert bucket_of(date(2024, 3, 10), sunday) == "earlier"

    def test_buckets_preserve_order(self, make_reservation):
        rs = [
            make_reservation(id="t1", created=TODAY),
            make_reservation(id="e1", created=date(2024, 1, 1)),
            make_reservation(id="t2", created=TODAY),
            make_reservation(id="w1", created=date(2024, 3, 11)),
        ]
        buckets = bucket_reservations(rs, TODAY)
        assert ids(buckets["today"]) == ["t1", "t2"]
        assert ids(buckets["yesterday"]) == []
        assert ids(buckets["week"]) == ["w1"]
        assert ids(buckets["earlier"]) == ["e1"]


class TestBuildView:
    def test_grouped_view_omits_empty_groups(self, make_reservation):
        rs = [
            make_reservation(id="t", created=TODAY),
            make_reservation(id="e", created=date(2023, 1, 1)),
        ]
        view = build_view(rs, today=TODAY)
        assert view.grouped
        assert [g.key for g in view.groups] == ["today", "earlier"]
        assert view.groups[0].label == "🔥 HOY"
        assert view.empty_state is None

    def test_sort_forces_flat_view(self, make_reservation):
        rs = [make_reservation(id="a", holder="B"), make_reservation(id="b", holder="A")]
        view = build_view(rs, sort=SortConfig(SortKey.HOLDER, SortDirection.ASC), today=TODAY)
        assert not view.grouped
        assert ids(view.rows) == ["b", "a"]

    def test_search_forces_flat_view(self, make_reservation):
        rs = [make_reservation(id="a", created=TODAY)]
        view = build_view(rs, ViewFilters(search="juan"), today=TODAY)
        assert not view.grouped
        assert view.groups == []
        assert ids(view.rows) == ["a"]

    def test_empty_states_are_distinct(self, make_reservation):
        rs = [make_reservation(id="a")]
        flat = build_view(rs, ViewFilters(search="nadie"), today=TODAY)
        assert flat.empty_state == EmptyState.NO_MATCHES

        grouped = build_view([], today=TODAY)
        assert grouped.empty_state == EmptyState.NO_RESERVATIONS
        assert flat.empty_state.value != grouped.empty_state.value

    def test_range_filter_only_keeps_grouped_view(self, make_reservation):
        rs = [make_reservation(id="a", travel_date=date(2024, 2, 1))]
        view = build_view(rs, ViewFilters(date_from=date(2025, 1, 1)), today=TODAY)
        assert view.grouped
        assert view.empty_state == EmptyState.NO_RESERVATIONS

    def test_clear_filters(self):
        filters, sort = clear_filters()
        assert filters == ViewFilters()
        assert filters.date_axis == DateAxis.TRAVEL
        assert sort == SortConfig()
