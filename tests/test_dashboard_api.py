"""HTTP tests for the dashboard, database maintenance and health endpoints."""

from decimal import Decimal

import pytest

API = "/api/v1"


def seed(client):
    response = client.post(f"{API}/database/seed")
    assert response.status_code == 200, response.text
    return response.json()


class TestDashboard:
    def test_empty_database(self, client) -> None:
        response = client.get(f"{API}/dashboard")

        assert response.status_code == 200
        body = response.json()
        assert body["stats"]["total_customers"] == 0
        assert body["stats"]["total_outstanding"] == 0
        assert body["recent_loans"] == []
        assert body["recent_payments"] == []

    def test_seeded_totals(self, client) -> None:
        seed(client)

        stats = client.get(f"{API}/dashboard").json()["stats"]

        assert stats["total_customers"] == 3
        assert stats["total_loans"] == 3
        assert stats["active_loans"] == 3
        assert stats["paid_off_loans"] == 0
        assert stats["total_loan_amount"] == 1750000.0
        assert stats["total_collected"] == 0
        assert stats["total_outstanding"] == float(
            Decimal("615496.20") + Decimal("1351482.72") + Decimal("279955.80")
        )

    def test_payments_move_money_from_outstanding_to_collected(self, client) -> None:
        seed(client)
        loans = client.get(f"{API}/loans").json()
        small = min(loans, key=lambda l: l["total_amount"])

        client.post(f"{API}/loans/{small['loan_id']}/payments", json={"amount": small["total_amount"]})
        other = next(l for l in loans if l["loan_id"] != small["loan_id"])
        client.post(f"{API}/loans/{other['loan_id']}/payments", json={"amount": 1000})

        body = client.get(f"{API}/dashboard").json()
        stats = body["stats"]
        assert stats["paid_off_loans"] == 1
        assert stats["active_loans"] == 2
        assert stats["total_collected"] == pytest.approx(small["total_amount"] + 1000)
        assert len(body["recent_payments"]) == 2
        assert body["recent_loans"][0]["customer"] is not None


class TestDatabaseMaintenance:
    def test_status_counts(self, client) -> None:
        seed(client)

        body = client.get(f"{API}/database/status").json()

        assert body["connection"] == "connected"
        counts = {c["name"]: c["count"] for c in body["collections"]}
        assert counts == {"customers": 3, "loans": 3, "loan_payments": 0}

    def test_seed_twice_conflicts(self, client) -> None:
        assert seed(client)["data"] == {"customers": 3, "loans": 3}

        response = client.post(f"{API}/database/seed")

        assert response.status_code == 409
        assert client.get(f"{API}/dashboard").json()["stats"]["total_customers"] == 3

    def test_backup(self, client) -> None:
        seed(client)

        response = client.get(f"{API}/database/backup")

        assert response.status_code == 200
        assert response.headers["content-disposition"].startswith('attachment; filename="lendflow-backup-')
        body = response.json()
        assert body["stats"] == {"customers": 3, "loans": 3, "payments": 0}
        assert {c["email"] for c in body["data"]["customers"]} == {
            "raj.patel@example.com",
            "priya.sharma@example.com",
            "arjun.kumar@example.com",
        }

    def test_clear(self, client) -> None:
        seed(client)

        response = client.post(
            f"{API}/database/clear", json={"collections": ["customers", "loans", "payments"]}
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"payments": 0, "loans": 3, "customers": 3}
        assert client.get(f"{API}/customers").json() == []

    def test_clear_customers_with_loans_conflicts(self, client) -> None:
        seed(client)

        response = client.post(f"{API}/database/clear", json={"collections": ["customers"]})

        assert response.status_code == 409
        loans = client.get(f"{API}/loans").json()
        assert len(loans) == 3
        assert all(loan["customer"] is not None for loan in loans)
        assert len(client.get(f"{API}/customers").json()) == 3

    def test_clear_loans_with_payments_conflicts(self, client) -> None:
        seed(client)
        loan = client.get(f"{API}/loans").json()[0]
        client.post(f"{API}/loans/{loan['loan_id']}/payments", json={"amount": 1000})

        response = client.post(f"{API}/database/clear", json={"collections": ["loans", "customers"]})

        assert response.status_code == 409
        assert client.get(f"{API}/dashboard").json()["stats"]["total_loans"] == 3

    def test_clear_needs_a_collection(self, client) -> None:
        assert client.post(f"{API}/database/clear", json={"collections": []}).status_code == 422
        assert client.post(f"{API}/database/clear", json={"collections": ["users"]}).status_code == 422


class TestHealth:
    def test_root(self, client) -> None:
        assert client.get("/").json() == {"message": "LendFlow backend is running!!"}

    def test_health(self, client) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "OK"
        assert response.json()["database"] == "connected"
