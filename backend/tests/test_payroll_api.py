from datetime import date

from fastapi.testclient import TestClient

from hrpayroll.main import app


def create_employee(client, **overrides):
    payload = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "department": "Engineering",
        "base_salary": 6000,
        "allowances": {"housing": 500},
        "enable_auto_deduction": False,
    }
    payload.update(overrides)
    response = client.post("/employees", json=payload)
    assert response.status_code == 201
    return response.json()


def generate(client, month=3, year=2024, force=False):
    response = client.post("/payroll/generate", json={"month": month, "year": year, "force_regenerate": force})
    assert response.status_code == 200
    return response.json()


def test_company_header_is_required():
    with TestClient(app) as client:
        response = client.get("/payroll")

    assert response.status_code == 422


def test_generate_and_list(client):
    create_employee(client)
    create_employee(client, first_name="Grace", last_name="Hopper", department="Finance")

    body = generate(client)
    assert body["counts"] == {"success": 2, "skipped": 0, "regenerated": 0, "failed": 0}

    again = generate(client)
    assert again["counts"]["skipped"] == 2
    assert {item["reason"] for item in again["skipped"]} == {"exists"}

    listing = client.get("/payroll", params={"month": 3, "year": 2024}).json()
    assert listing["total"] == 2
    assert listing["total_pages"] == 1
    first = listing["items"][0]
    assert first["status"] == "DRAFT"
    assert first["gross_salary"] == 6500.0
    assert first["net_salary"] == 6500.0
    assert first["is_projection"] is False


def test_payroll_is_isolated_per_company(client):
    create_employee(client)
    generate(client)

    response = client.get("/payroll", headers={"X-Company-ID": "2"})

    assert response.json()["total"] == 0


def test_full_lifecycle_over_http(client):
    create_employee(client)
    generate(client)
    payroll_id = client.get("/payroll").json()["items"][0]["id"]

    edited = client.patch(f"/payroll/{payroll_id}", json={"bonuses": 250, "notes": "spot bonus"})
    assert edited.status_code == 200
    assert edited.json()["net_salary"] == 6750.0

    approved = client.post(f"/payroll/{payroll_id}/approve")
    assert approved.status_code == 200
    assert approved.json()["status"] == "APPROVED"

    paid = client.post(f"/payroll/{payroll_id}/pay", json={"method": "cash", "reference": "R-9"})
    assert paid.status_code == 200
    assert paid.json()["payment_method"] == "cash"

    again = client.post(f"/payroll/{payroll_id}/approve")
    assert again.status_code == 409
    assert again.json()["error"] == "invalid_state"

    fetched = client.get(f"/payroll/{payroll_id}").json()
    assert fetched["status"] == "PAID"
    assert fetched["notes"] == "spot bonus"


def test_pay_without_body_uses_default_method(client):
    create_employee(client)
    generate(client)
    payroll_id = client.get("/payroll").json()["items"][0]["id"]
    client.post(f"/payroll/{payroll_id}/approve")

    paid = client.post(f"/payroll/{payroll_id}/pay")

    assert paid.status_code == 200
    assert paid.json()["payment_method"] == "bank_transfer"


def test_error_mapping(client):
    employee = create_employee(client)

    missing = client.get("/payroll/999")
    assert missing.status_code == 404
    assert missing.json() == {"error": "not_found", "detail": "Payroll 999 not found"}

    created = client.post("/payroll", json={"employee_id": employee["id"], "month": 3, "year": 2024})
    assert created.status_code == 201
    duplicate = client.post("/payroll", json={"employee_id": employee["id"], "month": 3, "year": 2024})
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "duplicate"

    bad_period = client.get("/payroll/summary", params={"month": 3, "year": 1999})
    assert bad_period.status_code == 422
    assert bad_period.json()["error"] == "invalid_input"

    negative = client.patch(f"/payroll/{created.json()['id']}", json={"bonuses": -5})
    assert negative.status_code == 422


def test_bulk_pay_returns_per_item_results(client):
    for name in ("Ada", "Grace", "Katherine"):
        create_employee(client, first_name=name)
    generate(client)
    ids = [item["id"] for item in client.get("/payroll").json()["items"]]
    for payroll_id in ids:
        client.post(f"/payroll/{payroll_id}/approve")
    for payroll_id in ids[1:]:
        client.post(f"/payroll/{payroll_id}/pay")

    response = client.post("/payroll/bulk-pay", json={"ids": ids})

    assert response.status_code == 200
    body = response.json()
    assert body["updated"] == 1
    assert body["failed"] == 2
    assert [item["error"] for item in body["results"] if not item["ok"]] == ["invalid_state", "invalid_state"]


def test_cancel_without_body(client):
    create_employee(client)
    generate(client)
    payroll_id = client.get("/payroll").json()["items"][0]["id"]

    cancelled = client.post(f"/payroll/{payroll_id}/cancel")

    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "CANCELLED"
    assert client.get("/payroll", params={"status": "CANCELLED"}).json()["total"] == 1


def test_summary_and_annual_report(client):
    create_employee(client)
    create_employee(client, first_name="Grace", department="Finance", base_salary=4000, allowances={})
    generate(client, month=1)
    generate(client, month=2)
    payroll_id = client.get("/payroll", params={"month": 2}).json()["items"][0]["id"]
    client.post(f"/payroll/{payroll_id}/approve")

    summary = client.get("/payroll/summary", params={"month": 2, "year": 2024}).json()
    assert summary["total_employees"] == 2
    assert summary["total_gross"] == 10500.0
    assert summary["by_status"] == {"APPROVED": 1, "DRAFT": 1}
    assert summary["by_department"]["Finance"] == {"count": 1, "total_net": 4000.0}

    report = client.get("/payroll/annual-report", params={"year": 2024}).json()
    assert report["year"] == 2024
    assert len(report["employees"]) == 2
    assert [entry["month"] for entry in report["employees"][0]["months"]] == [1, 2]
    assert report["employees"][0]["gross"] == 13000.0


def test_projection_endpoint(client):
    employee = create_employee(client)

    response = client.get(f"/payroll/projection/{employee['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["is_projection"] is True
    assert body["status"] == "PROJECTION"
    assert body["id"] is None
    assert 0 <= body["earned_ratio"] <= 1


def test_projection_endpoint_returns_stored_line_with_payment_details(client):
    employee = create_employee(client)
    today = date.today()
    created = client.post(
        "/payroll",
        json={"employee_id": employee["id"], "month": today.month, "year": today.year, "notes": "first run"},
    ).json()
    client.post(f"/payroll/{created['id']}/approve")
    client.post(f"/payroll/{created['id']}/pay", json={"method": "cash", "reference": "R-9"})

    body = client.get(f"/payroll/projection/{employee['id']}").json()

    assert body["id"] == created["id"]
    assert body["is_projection"] is False
    assert body["status"] == "PAID"
    assert body["payment_method"] == "cash"
    assert body["payment_reference"] == "R-9"
    assert body["approved_at"] is not None
    assert body["paid_at"] is not None
    assert body["notes"] == "first run"


def test_projection_for_unknown_employee(client):
    response = client.get("/payroll/projection/404")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_payroll_csv_report(client):
    create_employee(client)
    generate(client)

    response = client.get("/reports/payroll.csv", params={"month": 3, "year": 2024})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("payroll_id,employee_id,employee_name,department")
    assert len(lines) == 2
    assert "Ada Lovelace" in lines[1]
    assert ",6500.00," in lines[1]
