from decimal import Decimal

from cashmemo.models import format_taka, parse_amount, to_money


class TestToMoney:
    def test_none_is_zero(self):
        assert to_money(None) == Decimal("0.00")

    def test_rounds_half_up(self):
        assert to_money(Decimal("2.345")) == Decimal("2.35")

    def test_float_goes_through_str(self):
        assert to_money(0.1 + 0.2) == Decimal("0.30")

    def test_int(self):
        assert str(to_money(5)) == "5.00"


class TestFormatTaka:
    def test_zero(self):
        assert format_taka(0) == "Tk 0.00"

    def test_thousands_separator(self):
        assert format_taka(Decimal("1234.5")) == "Tk 1,234.50"

    def test_lakh_amount_uses_western_grouping(self):
        assert format_taka(150000) == "Tk 150,000.00"

    def test_negative(self):
        assert format_taka(Decimal("-50")) == "-Tk 50.00"

    def test_custom_symbol(self):
        assert format_taka(10, symbol="BDT") == "BDT 10.00"


class TestParseAmount:
    def test_plain_integer(self):
        assert parse_amount("1200") == Decimal("1200")

    def test_decimal(self):
        assert parse_amount("1200.50") == Decimal("1200.50")

    def test_thousands_separator(self):
        assert parse_amount("1,200.50") == Decimal("1200.50")

    def test_surrounding_whitespace(self):
        assert parse_amount("  100  ") == Decimal("100")

    def test_empty_string(self):
        assert parse_amount("") is None

    def test_whitespace(self):
        assert parse_amount("   ") is None

    def test_none(self):
        assert parse_amount(None) is None

    def test_invalid_text(self):
        assert parse_amount("abc") is None

    def test_negative(self):
        assert parse_amount("-5") is None

    def test_non_finite(self):
        assert parse_amount("NaN") is None
        assert parse_amount("Infinity") is None
