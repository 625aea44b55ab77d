from conftest import expense_payload


class TestExpensesCRUD:
    def test_amount_round_trip(self, client):
        created = client.post("/api/expenses", json=expense_payload(amount=12.5))
        assert created.status_code == 201
        assert created.json()["amount"] == 12.5

        fetched = client.get("/api/expenses/2024-05-01").json()
        assert [e["amount"] for e in fetched] == [12.5]

    def test_empty_day_is_an_empty_list(self, client):
        res = client.get("/api/expenses/2024-05-01")
        assert res.status_code == 200
        assert res.json() == []

    def test_invalid_day(self, client):
        res = client.get("/api/expenses/2024-00-10")
        assert res.status_code == 400

    def test_list_by_day_only_returns_that_day(self, client):
        client.post("/api/expenses", json=expense_payload(day="2024-05-01", description="Lunch"))
        client.post("/api/expenses", json=expense_payload(day="2024-05-02", description="Bus"))
        res = client.get("/api/expenses/2024-05-02")
        assert [e["description"] for e in res.json()] == ["Bus"]

    def test_list_newest_first(self, client):
        client.post("/api/expenses", json=expense_payload(day="2024-05-01"))
        client.post("/api/expenses", json=expense_payload(day="2024-05-03"))
        client.post("/api/expenses", json=expense_payload(day="2024-05-02"))
        dates = [e["date"] for e in client.get("/api/expenses").json()]
        assert dates == ["2024-05-03", "2024-05-02", "2024-05-01"]

    def test_update_category_only(self, client):
        created = client.post("/api/expenses", json=expense_payload()).json()
        res = client.put(f"/api/expenses/{created['id']}", json={"category": "entertainment"})
        assert res.status_code == 200
        assert res.json()["category"] == "entertainment"
        assert res.json()["amount"] == 12.5
        assert res.json()["createdAt"] == created["createdAt"]

    def test_delete(self, client):
        created = client.post("/api/expenses", json=expense_payload()).json()
        assert client.delete(f"/api/expenses/{created['id']}").status_code == 204
        res = client.delete(f"/api/expenses/{created['id']}")
        assert res.status_code == 404
        assert res.json()["message"] == "Expense not found"


class TestExpenseValidation:
    def test_negative_amount(self, client):
        res = client.post("/api/expenses", json=expense_payload(amount=-1))
        assert res.status_code == 400
        assert "amount" in res.json()["message"]

    def test_zero_amount_is_allowed(self, client):
        assert client.post("/api/expenses", json=expense_payload(amount=0)).status_code == 201

    def test_unknown_category(self, client):
        res = client.post("/api/expenses", json=expense_payload(category="rent"))
        assert res.status_code == 400

    def test_negative_amount_in_update(self, client):
        created = client.post("/api/expenses", json=expense_payload()).json()
        res = client.put(f"/api/expenses/{created['id']}", json={"amount": -3})
        assert res.status_code == 400
        # the stored value is unchanged
        assert client.get("/api/expenses").json()[0]["amount"] == 12.5
