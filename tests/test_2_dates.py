from datetime import date, datetime

import pytest

from israeli_bank_ynab.dates import (
    Installment,
    derive_installment_date,
    expand_year,
    format_date,
    parse_date,
    parse_installments,
    shift_months,
)


@pytest.mark.dependency()
class TestInstallments:
    """Installment notation in descriptions."""

    @pytest.mark.dependency()
    def test_hebrew_payment_notation(self):
        assert parse_installments('תשלום 2 מ-12') == Installment(2, 12)
        assert parse_installments('תשלום 3 מ - 6') == Installment(3, 6)
        assert parse_installments('ALIEXPRESS תשלום 1 מ-3') == Installment(1, 3)

    def test_out_of_notation(self):
        assert parse_installments('2 מתוך 12') == Installment(2, 12)
        assert parse_installments('3מתוך6') == Installment(3, 6)

    def test_english_notation(self):
        assert parse_installments('Payment 1 of 3') == Installment(1, 3)
        assert parse_installments('PAYMENT 4 OF 10') == Installment(4, 10)

    def test_tuple_fields(self):
        installment = parse_installments('תשלום 5 מ-10')
        assert installment.number == 5
        assert installment.total == 10

    def test_no_installment(self):
        assert parse_installments('סופר פארם') is None
        assert parse_installments('') is None
        assert parse_installments(None) is None

    @pytest.mark.dependency(depends=["TestInstallments::test_hebrew_payment_notation"])
    def test_inconsistent_numbers(self):
        assert parse_installments('תשלום 13 מ-12') is None
        assert parse_installments('תשלום 0 מ-12') is None
        assert parse_installments('payment 1 of 0') is None


class TestExpandYear:

    def test_two_digit_years(self):
        assert expand_year('24') == 2024
        assert expand_year('69') == 2069
        assert expand_year('70') == 1970
        assert expand_year('75') == 1975

    def test_four_digit_years(self):
        assert expand_year('2024') == 2024
        assert expand_year('1999') == 1999


@pytest.mark.dependency()
class TestParseDate:

    @pytest.mark.dependency()
    def test_iso_strings(self):
        assert parse_date('2024-03-15') == date(2024, 3, 15)
        assert parse_date('2024-03-15T10:30:00') == date(2024, 3, 15)
        assert parse_date('2024-03-15T00:00:00.000Z') == date(2024, 3, 15)
        assert parse_date('2024-03-15T23:00:00+02:00') == date(2024, 3, 15)

    def test_israeli_order(self):
        assert parse_date('15/03/2024') == date(2024, 3, 15)
        assert parse_date('5.3.24') == date(2024, 3, 5)
        assert parse_date('15-03-2024') == date(2024, 3, 15)

    def test_date_objects(self):
        assert parse_date(date(2024, 3, 15)) == date(2024, 3, 15)
        assert parse_date(datetime(2024, 3, 15, 12, 0)) == date(2024, 3, 15)

    def test_invalid_dates(self):
        assert parse_date('31/02/2024') is None
        assert parse_date('2024-13-01') is None
        assert parse_date('not a date') is None
        assert parse_date('') is None
        assert parse_date(None) is None
        assert parse_date(20240315) is None


class TestFormatDate:

    def test_formats(self):
        assert format_date('2024-03-15T00:00:00.000Z') == '2024-03-15'
        assert format_date('15/03/24') == '2024-03-15'
        assert format_date(date(2024, 1, 5)) == '2024-01-05'

    def test_invalid_raises(self):
        with pytest.raises(ValueError, match='Invalid date'):
            format_date('garbage')
        with pytest.raises(ValueError):
            format_date(None)


class TestShiftMonths:

    def test_simple_shift(self):
        assert shift_months(date(2024, 3, 15), -1) == date(2024, 2, 15)
        assert shift_months(date(2024, 3, 15), 1) == date(2024, 4, 15)

    def test_year_boundary(self):
        assert shift_months(date(2024, 1, 10), -1) == date(2023, 12, 10)
        assert shift_months(date(2023, 12, 10), 1) == date(2024, 1, 10)

    def test_day_overflow_rolls_forward(self):
        # Feb 2024 has 29 days
        assert shift_months(date(2024, 3, 31), -1) == date(2024, 3, 2)
        assert shift_months(date(2023, 3, 30), -1) == date(2023, 3, 2)


@pytest.mark.dependency(depends=["TestParseDate::test_iso_strings"])
class TestInstallmentDate:
    """One month back, one day forward."""

    def test_mid_month(self):
        assert derive_installment_date('2024-03-15') == '2024-02-16'

    def test_january(self):
        assert derive_installment_date('2024-01-10') == '2023-12-11'

    def test_timestamp_input(self):
        assert derive_installment_date('2024-03-10T00:00:00.000Z') == '2024-02-11'

    def test_month_end(self):
        assert derive_installment_date('2024-03-31') == '2024-03-03'
        assert derive_installment_date('2024-05-31') == '2024-05-02'

    def test_same_offset_for_every_installment(self):
        # Installments 1..3 charged a month apart land a month apart
        charges = ['2024-01-15', '2024-02-15', '2024-03-15']
        assert [derive_installment_date(c) for c in charges] == [
            '2023-12-16', '2024-01-16', '2024-02-16',
        ]

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            derive_installment_date('not a date')
        with pytest.raises(ValueError):
            derive_installment_date(None)
