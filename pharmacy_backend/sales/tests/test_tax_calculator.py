# sales/tests/test_tax_calculator.py

from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase, override_settings

from sales.services.tax_calculator import (
    EXCLUSIVE,
    INCLUSIVE,
    calculate_sale_totals,
    calculate_tax,
    calculate_tax_at_rate,
    line_as_calculation,
    price_line,
    resolve_line_discount,
    resolve_tax_rate,
)


def _settings(rate="16.00", mode="EXCLUSIVE", charge_vat=True):
    return SimpleNamespace(
        charge_vat=charge_vat,
        default_vat_rate=Decimal(rate),
        pricing_mode=mode,
    )


def _product(classification="STANDARD", tax_rate=None):
    return SimpleNamespace(tax_classification=classification, tax_rate=tax_rate)


class TaxCalculatorTests(SimpleTestCase):
    """
    Pure VAT arithmetic. No database.
    """

    def test_exclusive_vat(self):
        calc = calculate_tax(
            product=_product(),
            quantity=2,
            unit_price=Decimal("100.00"),
            tax_settings=_settings(),
        )

        self.assertEqual(calc.net_amount, Decimal("200.00"))
        self.assertEqual(calc.tax_amount, Decimal("32.00"))
        self.assertEqual(calc.gross_amount, Decimal("232.00"))
        self.assertEqual(calc.tax_rate, Decimal("16.00"))

    def test_inclusive_vat(self):
        calc = calculate_tax(
            product=_product(),
            quantity=1,
            unit_price=Decimal("116.00"),
            tax_settings=_settings(mode=INCLUSIVE),
        )

        self.assertEqual(calc.gross_amount, Decimal("116.00"))
        self.assertEqual(calc.tax_amount, Decimal("16.00"))
        self.assertEqual(calc.net_amount, Decimal("100.00"))

    def test_exclusive_gross_round_trips_through_inclusive(self):
        cent = Decimal("0.01")
        for rate in ("0.00", "8.00", "16.00", "16.50"):
            for unit_price in ("0.01", "0.99", "9.99", "17.35", "100.00", "1234.56"):
                for quantity in (1, 3, 7):
                    with self.subTest(rate=rate, unit_price=unit_price, quantity=quantity):
                        exclusive = calculate_tax_at_rate(
                            quantity=quantity,
                            unit_price=Decimal(unit_price),
                            rate=Decimal(rate),
                            pricing_mode=EXCLUSIVE,
                        )
                        inclusive = calculate_tax_at_rate(
                            quantity=1,
                            unit_price=exclusive.gross_amount,
                            rate=Decimal(rate),
                            pricing_mode=INCLUSIVE,
                        )

                        self.assertEqual(exclusive.net_amount + exclusive.tax_amount, exclusive.gross_amount)
                        self.assertEqual(inclusive.gross_amount - inclusive.tax_amount, inclusive.net_amount)
                        self.assertLessEqual(abs(inclusive.net_amount - exclusive.net_amount), cent)

    def test_discount_scales_tax_proportionally(self):
        calc = calculate_tax_at_rate(
            quantity=1, unit_price=Decimal("100.00"), rate=Decimal("16"), pricing_mode="EXCLUSIVE"
        )
        pricing = price_line(calculation=calc, discount_amount=Decimal("20.00"))

        self.assertEqual(pricing.net_amount, Decimal("100.00"))
        self.assertEqual(pricing.discounted_net_amount, Decimal("80.00"))
        self.assertEqual(pricing.tax_amount, Decimal("12.80"))
        self.assertEqual(pricing.line_total, Decimal("92.80"))

    def test_discount_is_capped_at_net(self):
        calc = calculate_tax_at_rate(
            quantity=1, unit_price=Decimal("50.00"), rate=Decimal("16"), pricing_mode="EXCLUSIVE"
        )
        pricing = price_line(calculation=calc, discount_amount=Decimal("80.00"))

        self.assertEqual(pricing.discount_amount, Decimal("50.00"))
        self.assertEqual(pricing.tax_amount, Decimal("0.00"))
        self.assertEqual(pricing.line_total, Decimal("0.00"))

    def test_negative_discount_is_rejected(self):
        calc = calculate_tax_at_rate(
            quantity=1, unit_price=Decimal("50.00"), rate=Decimal("16"), pricing_mode="EXCLUSIVE"
        )
        with self.assertRaises(ValueError):
            price_line(calculation=calc, discount_amount=Decimal("-1.00"))

    def test_vat_off_means_no_tax(self):
        calc = calculate_tax(
            product=_product(),
            quantity=3,
            unit_price=Decimal("10.00"),
            tax_settings=_settings(charge_vat=False),
        )

        self.assertEqual(calc.tax_amount, Decimal("0.00"))
        self.assertEqual(calc.net_amount, calc.gross_amount)

    def test_rate_by_classification(self):
        tax_settings = _settings()

        self.assertEqual(resolve_tax_rate(product=_product("ZERO"), tax_settings=tax_settings), Decimal("0.00"))
        self.assertEqual(resolve_tax_rate(product=_product("EXEMPT"), tax_settings=tax_settings), Decimal("0.00"))
        self.assertEqual(
            resolve_tax_rate(product=_product("STANDARD", Decimal("12.50")), tax_settings=tax_settings),
            Decimal("12.50"),
        )

    @override_settings(POS_REDUCED_VAT_RATE="8.00")
    def test_reduced_rate_falls_back_to_setting(self):
        self.assertEqual(
            resolve_tax_rate(product=_product("REDUCED"), tax_settings=_settings()),
            Decimal("8.00"),
        )

    def test_percentage_discount_when_no_amount(self):
        self.assertEqual(
            resolve_line_discount(net_amount=Decimal("200.00"), discount_percentage=Decimal("10")),
            Decimal("20.00"),
        )
        self.assertEqual(
            resolve_line_discount(
                net_amount=Decimal("200.00"),
                discount_amount=Decimal("5.00"),
                discount_percentage=Decimal("10"),
            ),
            Decimal("5.00"),
        )

    def test_totals_round_per_line_then_sum(self):
        lines = [
            calculate_tax_at_rate(quantity=1, unit_price=Decimal("0.10"), rate=Decimal("16"), pricing_mode="EXCLUSIVE")
            for _ in range(3)
        ]

        totals = calculate_sale_totals(lines)

        # 0.016 rounds to 0.02 per line
        self.assertEqual(totals.tax_amount, Decimal("0.06"))
        self.assertEqual(totals.net_amount, Decimal("0.30"))
        self.assertEqual(totals.gross_amount, Decimal("0.36"))

    def test_line_as_calculation_uses_discounted_values(self):
        calc = calculate_tax_at_rate(
            quantity=1, unit_price=Decimal("100.00"), rate=Decimal("16"), pricing_mode="EXCLUSIVE"
        )
        agg = line_as_calculation(price_line(calculation=calc, discount_amount=Decimal("20.00")))

        self.assertEqual(agg.net_amount, Decimal("80.00"))
        self.assertEqual(agg.gross_amount, Decimal("92.80"))
