from __future__ import annotations

from conftest import AUTH


def seed(client):
    client.post(
        "/api/employees",
        json={"employees": [
            {"employee_code": "E001", "employee_name": "Alice", "store_id": "S1",
             "employment_type": "full_time", "current_position": "專員"},
            {"employee_code": "E002", "employee_name": "Bob", "store_id": "S1",
             "employment_type": "full_time", "current_position": "specialist"},
        ]},
        headers=AUTH,
    )
    for code in ("E001", "E002"):
        for month in ("2025-03", "2025-04"):
            resp = client.put(
                f"/api/monthly-status/{code}/{month}",
                json={"store_id": "S1", "employee_name": code, "position": "specialist",
                      "employment_type": "full_time", "monthly_status": "full_month",
                      "employment_status": "active", "work_hours": 176},
                headers=AUTH,
            )
            assert resp.status_code == 200


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.data == b"OK"


def test_movement_batch_created_then_skipped(client):
    seed(client)
    body = {"movements": [
        {"employee_code": "E002", "employee_name": "Bob", "movement_type": "leave_without_pay",
         "effective_date": "2025-03-01"},
        {"employee_code": "E001", "employee_name": "Alice", "movement_type": "promotion",
         "position": "store manager", "effective_date": "2025-04-01"},
    ]}
    first = client.post("/api/employee-movements/batch", json=body, headers=AUTH)
    assert first.status_code == 200
    data = first.get_json()
    assert data["success"] is True
    assert (data["created"], data["skipped"]) == (2, 0)

    second = client.post("/api/employee-movements/batch", json=body, headers=AUTH).get_json()
    assert (second["created"], second["skipped"]) == (0, 2)

    march = client.get("/api/monthly-status/E002/2025-03").get_json()
    april = client.get("/api/monthly-status/E002/2025-04").get_json()
    assert march["monthly_status"] == "leave_without_pay"
    assert april["monthly_status"] == "full_month"

    history = client.get("/api/employee-movements?employee_code=e001").get_json()["movements"]
    assert history[0]["old_value"] == "specialist"
    assert history[0]["new_value"] == "store_manager"
    assert history[0]["created_by"] == "tester"


def test_movement_batch_reports_row_errors(client):
    body = {"movements": [
        {"employee_code": "E001", "employee_name": "Alice", "movement_type": "promotion",
         "effective_date": "2025-04-01"},
    ]}
    resp = client.post("/api/employee-movements/batch", json=body, headers=AUTH)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["success"] is False
    assert data["created"] == 0
    assert data["errors"][0]["index"] == 0


def test_batch_level_failures(client):
    assert client.post("/api/employee-movements/batch", json={"movements": []}, headers=AUTH).status_code == 400
    assert client.post("/api/employee-movements/batch", json={"movements": [{}]}).status_code == 401
    assert client.post("/api/promotions/batch-global", json={}, headers=AUTH).status_code == 400
    resp = client.post("/api/promotions/batch", json={"promotions": [{"employee_code": "E1"}]}, headers=AUTH)
    assert resp.status_code == 400


def test_promotion_batches(client):
    seed(client)
    promo = {"employee_code": "E001", "employee_name": "Alice", "position": "督導",
             "effective_date": "2025-03-10"}
    resp = client.post("/api/promotions/batch-global", json={"promotions": [promo]}, headers=AUTH)
    data = resp.get_json()
    assert data == {"success": True, "created": 1, "skipped": 0, "errors": []}

    scoped = client.post(
        "/api/promotions/batch",
        json={"store_id": "S1", "promotions": [dict(promo, effective_date="2025-04-10", position="代理店長")]},
        headers=AUTH,
    ).get_json()
    assert scoped["created"] == 1

    rows = client.get("/api/monthly-status?month=2025-04&store_id=S1").get_json()["staff"]
    alice = next(row for row in rows if row["employee_code"] == "E001")
    assert alice["position"] == "acting_store_manager"
    assert alice["stage"] == "tier-3"
    assert alice["block"] == 1

    bad = client.post(
        "/api/promotions/batch-global",
        json={"promotions": [{"employee_code": "E001", "employee_name": "Alice", "effective_date": "2025-05-01"}]},
        headers=AUTH,
    ).get_json()
    assert bad["success"] is False
    assert "requires a position" in bad["error"]


def test_confirmed_snapshot_is_locked(client):
    seed(client)
    resp = client.post("/api/monthly-status/confirm", json={"month": "2025-03", "store_id": "S1"}, headers=AUTH)
    assert resp.get_json()["confirmed"] == 2

    edit = client.put("/api/monthly-status/E001/2025-03", json={"is_dual_position": True}, headers=AUTH)
    assert edit.status_code == 409
    assert client.delete("/api/monthly-status/E001/2025-03", headers=AUTH).status_code == 409
    assert client.delete("/api/monthly-status/E001/2025-04", headers=AUTH).status_code == 200
    assert client.get("/api/monthly-status/E001/2025-04").status_code == 404


def test_manual_edit_recomputes_block(client):
    seed(client)
    resp = client.put(
        "/api/monthly-status/E001/2025-03",
        json={"position": "督導(代理店長)", "is_dual_position": True},
        headers=AUTH,
    )
    snapshot = resp.get_json()["snapshot"]
    assert snapshot["block"] == 4
    assert snapshot["position"] == "supervisor_acting_store_manager"

    bad = client.put("/api/monthly-status/E001/2025-03", json={"monthly_status": "sometimes"}, headers=AUTH)
    assert bad.status_code == 400
    assert client.get("/api/monthly-status?month=2025-13").status_code == 400


def test_export_csv(client):
    seed(client)
    resp = client.get("/api/monthly-status/export.csv?month=2025-03")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "monthly_staff_status_2025-03.csv" in resp.headers["Content-Disposition"]
    lines = resp.get_data(as_text=True).strip().splitlines()
    assert lines[0].startswith("store_id,month,employee_code")
    assert lines[1].split(",")[:7] == ["S1", "2025-03", "E001", "E001", "1", "specialist", "tier-3"]


def test_replay_endpoint(client):
    seed(client)
    client.post(
        "/api/promotions/batch-global",
        json={"promotions": [{"employee_code": "E002", "employee_name": "Bob", "position": "supervisor",
                              "effective_date": "2025-03-01"}]},
        headers=AUTH,
    )
    resp = client.post("/api/employee-movements/replay/e002", headers=AUTH)
    assert resp.get_json() == {"success": True, "replayed": 1}


def test_employee_upsert_requires_caller(client):
    row = {"employee_code": "E050", "employee_name": "Nobody"}
    assert client.post("/api/employees", json=row).status_code == 401
    assert client.get("/api/employees/E050").status_code == 404


def test_employee_flags_parse_text(client):
    row = {"employee_code": "E051", "employee_name": "Flags", "is_pharmacist": "false", "is_active": "true"}
    assert client.post("/api/employees", json=row, headers=AUTH).status_code == 201
    employee = client.get("/api/employees/E051").get_json()
    assert employee["is_pharmacist"] is False
    assert employee["is_active"] is True


def test_non_text_choice_is_rejected(client):
    row = {"employee_code": "E052", "employee_name": "Odd", "employment_type": ["full_time"]}
    resp = client.post("/api/employees", json=row, headers=AUTH)
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False

    resp = client.put(
        "/api/monthly-status/E052/2025-03",
        json={"employee_name": "Odd", "monthly_status": {"value": "full_month"}},
        headers=AUTH,
    )
    assert resp.status_code == 400
