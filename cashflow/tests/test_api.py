import unittest
from decimal import Decimal

from fastapi.testclient import TestClient

from cashflow.main import app

SALARY = {
    "title": "Salary",
    "amount": "1500",
    "type": "income",
    "frequency": "bi-weekly",
    "anchor_date": "2024-01-05",
}
RENT = {
    "title": "Rent",
    "amount": "900",
    "type": "expense",
    "frequency": "monthly",
    "anchor_date": "2024-01-31",
}
CARD = {
    "title": "Credit card",
    "amount": "100",
    "type": "debt",
    "frequency": "monthly",
    "anchor_date": "2024-01-10",
    "remaining_balance": "600",
    "interest_type": "monetary",
    "monthly_interest": "20",
}


class ApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_next_occurrences_sorted_by_due_date(self) -> None:
        response = self.client.post(
            "/occurrences/next",
            json={"events": [RENT, SALARY], "reference": "2024-02-01"},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([entry["title"] for entry in body], ["Salary", "Rent"])
        self.assertEqual(body[0]["next_due_date"], "2024-02-02")
        self.assertEqual(body[0]["label"], "Due tomorrow")
        self.assertEqual(body[0]["urgency"], "soon")
        self.assertEqual(body[1]["next_due_date"], "2024-02-29")
        self.assertEqual(body[1]["index"], 0)

    def test_due_events(self) -> None:
        response = self.client.post(
            "/occurrences/due",
            json={"events": [SALARY, RENT], "date": "2024-02-29"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [(entry["index"], entry["kind"]) for entry in response.json()],
            [(1, "expense")],
        )

    def test_forecast_uses_default_window(self) -> None:
        response = self.client.post(
            "/forecast",
            json={"events": [SALARY, CARD], "start": "2024-01-05"},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body), 7)
        self.assertEqual(body[0]["date"], "2024-01-05")
        self.assertEqual(Decimal(body[0]["income"]), Decimal("1500"))
        self.assertEqual(Decimal(body[5]["debts"]), Decimal("100"))

    def test_forecast_rejects_oversized_window(self) -> None:
        response = self.client.post(
            "/forecast",
            json={"events": [], "start": "2024-01-01", "days": 10000},
        )
        self.assertEqual(response.status_code, 400)

    def test_calendar_month(self) -> None:
        response = self.client.post("/calendar/2024/2", json={"events": [SALARY, RENT]})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body), 29)
        self.assertEqual(body[-1]["due"][0]["title"], "Rent")
        self.assertEqual(Decimal(body[-1]["expenses"]), Decimal("900"))

    def test_calendar_rejects_bad_month(self) -> None:
        response = self.client.post("/calendar/2024/0", json={"events": []})
        self.assertEqual(response.status_code, 400)

    def test_summary(self) -> None:
        response = self.client.post("/summary", json={"events": [SALARY, RENT, CARD]})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(Decimal(body["monthly_income"]), Decimal("3255"))
        self.assertEqual(Decimal(body["monthly_debt"]), Decimal("100"))
        self.assertEqual(Decimal(body["total_debt"]), Decimal("600"))

    def test_debt_amortization(self) -> None:
        response = self.client.post(
            "/debts/amortization",
            json={"event": CARD, "today": "2024-01-01"},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["weeks_to_payoff"], 33)
        self.assertEqual(body["status"], "paying_down")
        self.assertEqual(body["payoff_date"], "2024-08-19")
        self.assertEqual(Decimal(body["net_monthly_payment"]), Decimal("80"))

    def test_debt_amortization_percentage_interest(self) -> None:
        loan = dict(
            CARD,
            amount="248",
            remaining_balance="2400",
            interest_type="percentage",
            interest_rate="24",
            rate_frequency="annual",
        )
        response = self.client.post("/debts/amortization", json={"event": loan})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["weeks_to_payoff"], 52)
        self.assertIsNone(body["payoff_date"])

    def test_debt_amortization_flags_not_paying(self) -> None:
        paused = dict(CARD, amount="0")
        response = self.client.post("/debts/amortization", json={"event": paused})

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["weeks_to_payoff"])
        self.assertEqual(response.json()["status"], "not_paying")

    def test_rejects_negative_amount(self) -> None:
        response = self.client.post(
            "/summary",
            json={"events": [dict(RENT, amount="-5")]},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("negative", response.json()["detail"])

    def test_rejects_unknown_frequency(self) -> None:
        response = self.client.post(
            "/summary",
            json={"events": [dict(RENT, frequency="daily")]},
        )
        self.assertEqual(response.status_code, 400)

    def test_rejects_amortization_of_income(self) -> None:
        response = self.client.post("/debts/amortization", json={"event": SALARY})
        self.assertEqual(response.status_code, 400)

    def test_percentage_interest_without_rate_charges_nothing(self) -> None:
        loan = dict(CARD, interest_type="percentage")
        del loan["monthly_interest"]
        response = self.client.post("/debts/amortization", json={"event": loan})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(Decimal(body["monthly_interest"]), Decimal("0"))
        self.assertEqual(body["weeks_to_payoff"], 26)

    def test_malformed_payload_is_bad_request(self) -> None:
        response = self.client.post(
            "/summary",
            json={"events": [dict(RENT, anchor_date="not-a-date")]},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIsInstance(response.json()["detail"], list)

    def test_missing_field_is_bad_request(self) -> None:
        response = self.client.post("/occurrences/next", json={"events": [RENT]})
        self.assertEqual(response.status_code, 400)

    def test_next_occurrence_past_date_max_is_bad_request(self) -> None:
        late = dict(RENT, anchor_date="9999-12-15")
        response = self.client.post(
            "/occurrences/next",
            json={"events": [late], "reference": "9999-12-20"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("supported date range", response.json()["detail"])

    def test_forecast_past_date_max_is_bad_request(self) -> None:
        response = self.client.post(
            "/forecast",
            json={"events": [RENT], "start": "9999-12-30", "days": 5},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("supported date range", response.json()["detail"])

    def test_forecast_ending_on_date_max(self) -> None:
        response = self.client.post(
            "/forecast",
            json={"events": [RENT], "start": "9999-12-30", "days": 2},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()[-1]["date"], "9999-12-31")

    def test_payoff_date_past_date_max_is_bad_request(self) -> None:
        response = self.client.post(
            "/debts/amortization",
            json={"event": CARD, "today": "9999-12-01"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("supported date range", response.json()["detail"])


if __name__ == "__main__":
    unittest.main()
