"""HTTP tests for the customer endpoints."""

import pytest

API = "/api/v1"


def create_customer(client, payload):
    response = client.post(f"{API}/customers", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateCustomer:
    def test_create(self, client, customer_payload) -> None:
        body = create_customer(client, customer_payload)

        assert body["customer_id"].startswith("CUST-")
        assert body["name"] == "Priya Sharma"
        assert body["email"] == "priya.sharma@example.com"
        assert body["created_on"] is not None

    def test_fields_are_trimmed(self, client, customer_payload) -> None:
        customer_payload["name"] = "  Priya Sharma  "
        customer_payload["email"] = "  priya.sharma@example.com "
        body = create_customer(client, customer_payload)

        assert body["name"] == "Priya Sharma"
        assert body["email"] == "priya.sharma@example.com"

    def test_duplicate_email_is_case_insensitive(self, client, customer_payload) -> None:
        create_customer(client, customer_payload)
        customer_payload["email"] = "PRIYA.SHARMA@example.com"

        response = client.post(f"{API}/customers", json=customer_payload)

        assert response.status_code == 409
        assert response.json()["detail"] == "Customer with this email already exists"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("name", "P"),
            ("email", "not-an-email"),
            ("phone", "call me"),
            ("address", ""),
        ],
    )
    def test_invalid_fields(self, client, customer_payload, field, value) -> None:
        customer_payload[field] = value

        response = client.post(f"{API}/customers", json=customer_payload)

        assert response.status_code == 422

    def test_missing_field(self, client, customer_payload) -> None:
        del customer_payload["phone"]

        assert client.post(f"{API}/customers", json=customer_payload).status_code == 422


class TestReadCustomers:
    def test_list(self, client, customer_payload) -> None:
        create_customer(client, customer_payload)
        customer_payload["email"] = "arjun.kumar@example.com"
        customer_payload["name"] = "Arjun Kumar"
        create_customer(client, customer_payload)

        response = client.get(f"{API}/customers")

        assert response.status_code == 200
        assert {c["name"] for c in response.json()} == {"Priya Sharma", "Arjun Kumar"}

    def test_get_one(self, client, customer_payload) -> None:
        created = create_customer(client, customer_payload)

        response = client.get(f"{API}/customers/{created['customer_id']}")

        assert response.status_code == 200
        assert response.json()["address"] == customer_payload["address"]

    def test_unknown_customer(self, client) -> None:
        response = client.get(f"{API}/customers/CUST-MISSING")

        assert response.status_code == 404
        assert response.json()["detail"] == "Customer not found"

    def test_customer_loans(self, client, customer_payload) -> None:
        created = create_customer(client, customer_payload)
        loan = client.post(
            f"{API}/loans",
            json={"customer_id": created["customer_id"], "amount": 250000, "interest_rate": 7.5, "term": 36},
        ).json()

        response = client.get(f"{API}/customers/{created['customer_id']}/loans")

        assert response.status_code == 200
        assert [l["loan_id"] for l in response.json()] == [loan["loan_id"]]

    def test_loans_of_unknown_customer(self, client) -> None:
        assert client.get(f"{API}/customers/CUST-MISSING/loans").status_code == 404
