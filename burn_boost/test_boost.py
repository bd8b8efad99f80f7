"""
Test boost calculation functions.
"""
import unittest
from burn_boost import boost
from burn_boost.boost import U64_MAX
from burn_boost.errors import Overflow, InsufficientSupply, ZeroSupplyError, ValidationError


class TestBurnedPercentage(unittest.TestCase):
    def test_ten_percent(self):
        self.assertEqual(boost.burned_percentage(100_000, 1_000_000), 1000)

    def test_floors_fractional_basis_points(self):
        # 1 of 3 is 3333.33bp
        self.assertEqual(boost.burned_percentage(1, 3), 3333)

    def test_nothing_burned(self):
        self.assertEqual(boost.burned_percentage(0, 1_000_000), 0)

    def test_everything_burned(self):
        self.assertEqual(boost.burned_percentage(1_000_000, 1_000_000), 10_000)

    def test_wide_intermediate(self):
        """total_burned * 10000 exceeds u64 but the result does not."""
        self.assertEqual(boost.burned_percentage(U64_MAX, U64_MAX), 10_000)

    def test_zero_supply_is_an_arithmetic_error(self):
        with self.assertRaises(ZeroSupplyError):
            boost.burned_percentage(10, 0)
        with self.assertRaises(ArithmeticError):
            boost.burned_percentage(10, 0)


class TestBoostMultiplier(unittest.TestCase):
    def test_no_burn_no_boost(self):
        self.assertEqual(boost.boost_multiplier(0), 10_000)

    def test_one_percent_burned_gives_point_one_percent(self):
        self.assertEqual(boost.boost_multiplier(100), 10_010)

    def test_ten_percent_burned(self):
        self.assertEqual(boost.boost_multiplier(1000), 10_100)

    def test_fifty_percent_burned(self):
        self.assertEqual(boost.boost_multiplier(5000), 10_500)

    def test_cap(self):
        self.assertEqual(boost.boost_multiplier(50_000), 15_000)
        self.assertEqual(boost.boost_multiplier(10 ** 9), boost.MAX_MULTIPLIER)

    def test_boost_amount_floors(self):
        # 15bp * 10 / 100 = 1.5 -> 1
        self.assertEqual(boost.boost_amount(15), 1)
        self.assertEqual(boost.boost_amount(9), 0)


class TestMarketCap(unittest.TestCase):
    def test_market_cap_with_boost(self):
        self.assertEqual(boost.current_market_cap(1_000_000, 10_100), 1_010_000)

    def test_market_cap_wide_intermediate(self):
        self.assertEqual(boost.current_market_cap(U64_MAX // 2, 15_000), (U64_MAX // 2) * 3 // 2)

    def test_market_cap_overflow(self):
        with self.assertRaises(Overflow):
            boost.current_market_cap(U64_MAX, 15_000)

    def test_boost_percentage(self):
        self.assertEqual(boost.boost_percentage(10_100), 100)
        self.assertEqual(boost.boost_percentage(10_000), 0)

    def test_boost_percentage_below_base(self):
        with self.assertRaises(Overflow):
            boost.boost_percentage(9_999)

    def test_remaining_supply_percentage(self):
        self.assertEqual(boost.remaining_supply_percentage(900_000, 1_000_000), 9000)


class TestCheckedArithmetic(unittest.TestCase):
    def test_add_overflow(self):
        with self.assertRaises(Overflow):
            boost.checked_add(U64_MAX, 1)

    def test_add_at_limit(self):
        self.assertEqual(boost.checked_add(U64_MAX - 1, 1), U64_MAX)

    def test_sub_insufficient(self):
        with self.assertRaises(InsufficientSupply) as ctx:
            boost.checked_sub(10, 11)
        self.assertEqual(ctx.exception.requested, 11)
        self.assertEqual(ctx.exception.available, 10)

    def test_sub_to_zero(self):
        self.assertEqual(boost.checked_sub(10, 10), 0)


class TestPreview(unittest.TestCase):
    def test_fresh_token_preview(self):
        result = boost.preview(0, 1_000_000, 50_000)
        self.assertEqual(result.burned_percentage, 500)
        self.assertEqual(result.boost_bp, 50)
        self.assertEqual(result.multiplier_bp, 10_050)

    def test_preview_is_not_clamped_to_supply(self):
        """Projecting past the initial supply reports more than 100%."""
        result = boost.preview(0, 1_000, 2_000)
        self.assertEqual(result.burned_percentage, 20_000)
        self.assertEqual(result.multiplier_bp, 12_000)

    def test_preview_reaches_cap(self):
        result = boost.preview(0, 1_000, 5_000)
        self.assertEqual(result.burned_percentage, 50_000)
        self.assertEqual(result.boost_bp, 5_000)
        self.assertEqual(result.multiplier_bp, 15_000)

    def test_preview_overflow(self):
        with self.assertRaises(Overflow):
            boost.preview(1, 1_000, U64_MAX)

    def test_preview_to_dict(self):
        self.assertEqual(
            boost.preview(100, 1_000, 0).to_dict(),
            {'burned_percentage': 1000, 'boost_bp': 100, 'multiplier_bp': 10_100},
        )


class TestDisplayHelpers(unittest.TestCase):
    def test_tokens_to_base_units(self):
        self.assertEqual(boost.tokens_to_base_units("1.5", 9), 1_500_000_000)
        self.assertEqual(boost.tokens_to_base_units(100, 0), 100)

    def test_tokens_to_base_units_rejects_sub_unit_amounts(self):
        with self.assertRaises(ValidationError):
            boost.tokens_to_base_units("0.0000000015", 9)
        with self.assertRaises(ValidationError):
            boost.tokens_to_base_units("1.5", 0)

    def test_tokens_to_base_units_rejects_non_numbers(self):
        for value in ("abc", "nan", "inf", "-Infinity", ""):
            with self.assertRaises(ValidationError):
                boost.tokens_to_base_units(value, 9)

    def test_format_token_amount(self):
        self.assertEqual(boost.format_token_amount(1_234_500_000_000, 9), "1,234.50")

    def test_format_bp(self):
        self.assertEqual(boost.format_bp(1050), "10.50%")
        self.assertEqual(boost.format_bp(5), "0.05%")


if __name__ == '__main__':
    unittest.main()
