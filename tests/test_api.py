from conftest import next_monday

MONDAY = "2026-02-16"
TUESDAY = "2026-02-17"
SUNDAY = "2026-02-15"


def _service(client, headers, name="Escova", duration=60, price=80.0):
    response = client.post(
        "/services/",
        json={"name": name, "duration_minutes": duration, "price": price},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def _book(client, headers, service_id, start_time="14:00", day=MONDAY, name="Maria", phone="+5511999990000"):
    return client.post(
        "/appointments/",
        json={
            "client_name": name,
            "client_phone": phone,
            "service_id": service_id,
            "date": day,
            "start_time": start_time,
        },
        headers=headers,
    )


def test_root(client):
    assert client.get("/").status_code == 200


def test_routes_require_auth(client):
    assert client.get("/appointments/").status_code == 401


def test_signup_creates_business_settings(client, auth_headers):
    response = client.get("/business-settings/", headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["slug"] == "studio-ana"
    assert body["open_days"] == ["Seg", "Ter", "Qua", "Qui", "Sex", "Sáb"]
    assert (body["open_time"], body["close_time"]) == ("09:00", "18:00")


def test_update_business_settings_validates_hours(client, auth_headers):
    response = client.put(
        "/business-settings/",
        json={"open_time": "19:00", "close_time": "10:00"},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidBusinessHours"

    response = client.put(
        "/business-settings/",
        json={"open_days": ["seg", "qua"], "open_time": "8:00"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["open_days"] == ["Seg", "Qua"]
    assert response.json()["open_time"] == "08:00"


def test_booking_scenario(client, auth_headers):
    service = _service(client, auth_headers)

    first = _book(client, auth_headers, service["id"])
    assert first.status_code == 201, first.text
    assert first.json()["status"] == "confirmed"
    assert first.json()["end_time"] == "15:00"

    second = _book(client, auth_headers, service["id"], "14:30", name="Joana", phone="+5511888880000")
    assert second.status_code == 409
    assert second.json()["error"] == "SlotConflict"


def test_available_endpoint(client, auth_headers):
    long_service = _service(client, auth_headers, "Mechas", 90, 200.0)
    short_service = _service(client, auth_headers, "Corte", 30, 60.0)
    hour_service = _service(client, auth_headers, "Escova", 60, 80.0)
    _book(client, auth_headers, hour_service["id"], "10:00")

    response = client.get(
        "/appointments/available",
        params={"day": MONDAY, "service_id": short_service["id"]},
        headers=auth_headers,
    )
    slots = response.json()["slots"]
    assert "09:30" in slots and "11:00" in slots
    assert "10:00" not in slots and "10:30" not in slots

    slots = client.get(
        "/appointments/available",
        params={"day": MONDAY, "service_id": long_service["id"]},
        headers=auth_headers,
    ).json()["slots"]
    assert "16:30" in slots
    assert "17:00" not in slots

    closed = client.get(
        "/appointments/available",
        params={"day": SUNDAY, "duration_minutes": 30},
        headers=auth_headers,
    ).json()
    assert closed["is_closed"] is True
    assert closed["slots"] == []

    invalid = client.get(
        "/appointments/available",
        params={"day": MONDAY, "duration_minutes": 0},
        headers=auth_headers,
    )
    assert invalid.status_code == 400
    assert invalid.json()["error"] == "InvalidDuration"


def test_status_flow_over_http(client, auth_headers):
    service = _service(client, auth_headers)
    appt = _book(client, auth_headers, service["id"]).json()
    url = f"/appointments/{appt['id']}"

    response = client.patch(f"{url}/finish", json={"payment_method": "pix", "satisfaction_score": 9}, headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "InvalidTransition"

    assert client.patch(f"{url}/start", headers=auth_headers).json()["status"] == "in_progress"

    response = client.patch(f"{url}/finish", json={"payment_method": "pix", "satisfaction_score": 11}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidScore"

    response = client.patch(f"{url}/finish", json={"payment_method": "pix", "satisfaction_score": 9}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["payment_method"] == "pix"


def test_reschedule_and_move_over_http(client, auth_headers):
    service = _service(client, auth_headers)
    appt = _book(client, auth_headers, service["id"], "10:00").json()
    url = f"/appointments/{appt['id']}"

    response = client.patch(f"{url}/reschedule", json={"date": TUESDAY, "start_time": "15:00"}, headers=auth_headers)
    assert response.status_code == 200
    assert (response.json()["date"], response.json()["end_time"]) == (TUESDAY, "16:00")

    response = client.patch(f"{url}/move", json={"start_time": "16:00"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["start_time"] == "16:00"
    assert response.json()["date"] == TUESDAY

    response = client.patch(f"{url}/move", json={"start_time": "17:30"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "OutsideBusinessHours"


def test_cancel_is_idempotent_over_http(client, auth_headers):
    service = _service(client, auth_headers)
    appt = _book(client, auth_headers, service["id"]).json()

    for _ in range(2):
        response = client.patch(f"/appointments/{appt['id']}/cancel", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "canceled"


def test_unknown_appointment_is_404(client, auth_headers):
    response = client.patch("/appointments/999/start", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "AppointmentNotFound"


def test_list_appointments_by_day(client, auth_headers):
    service = _service(client, auth_headers)
    _book(client, auth_headers, service["id"], "10:00")
    _book(client, auth_headers, service["id"], "10:00", day=TUESDAY)

    response = client.get("/appointments/", params={"day": MONDAY}, headers=auth_headers)
    assert [a["date"] for a in response.json()] == [MONDAY]


def test_combo_service_resolves_duration_and_price(client, auth_headers):
    corte = _service(client, auth_headers, "Corte", 30, 60.0)
    escova = _service(client, auth_headers, "Escova", 60, 80.0)

    response = client.post(
        "/services/",
        json={"name": "Corte + Escova", "kind": "combo", "included_service_ids": [corte["id"], escova["id"]], "price": 120.0},
        headers=auth_headers,
    )
    assert response.status_code == 201
    combo = response.json()
    assert combo["duration_minutes"] == 90
    assert combo["price"] == 120.0
    assert combo["original_price"] == 140.0


def test_public_booking_flow(client, auth_headers):
    service = _service(client, auth_headers)
    day = next_monday().isoformat()

    page = client.get("/public/studio-ana").json()
    assert [s["name"] for s in page["services"]] == ["Escova"]

    slots = client.get("/public/studio-ana/available", params={"day": day, "service_id": service["id"]}).json()
    assert "14:00" in slots["slots"]

    payload = {"name": "Maria", "phone": "+5511999990000", "service_id": service["id"], "date": day, "start_time": "14:00"}
    response = client.post("/public/studio-ana/bookings", json=payload)
    assert response.status_code == 201
    assert response.json()["status"] == "confirmed"
    assert response.json()["end_time"] == "15:00"

    again = client.post("/public/studio-ana/bookings", json={**payload, "name": "Joana", "phone": "1", "start_time": "14:30"})
    assert again.status_code == 409

    history = client.get("/public/studio-ana/history", params={"phone": "+55 11 99999-0000"}).json()
    assert len(history) == 1
    assert history[0]["service"] == "Escova"


def test_public_booking_only_accepts_offered_slots(client, auth_headers):
    service = _service(client, auth_headers)
    payload = {"name": "Maria", "phone": "1", "service_id": service["id"], "date": next_monday().isoformat()}

    off_grid = client.post("/public/studio-ana/bookings", json={**payload, "start_time": "09:07"})
    assert off_grid.status_code == 400
    assert off_grid.json()["error"] == "InvalidTime"

    with_seconds = client.post("/public/studio-ana/bookings", json={**payload, "start_time": "09:00:59"})
    assert with_seconds.status_code == 400

    past = client.post("/public/studio-ana/bookings", json={**payload, "date": "2000-01-03", "start_time": "10:00"})
    assert past.status_code == 400
    assert past.json()["error"] == "ValidationFailure"

    assert client.get("/appointments/", headers=auth_headers).json() == []


def test_public_unknown_business(client):
    response = client.get("/public/nao-existe")
    assert response.status_code == 404
    assert response.json()["error"] == "BusinessNotFound"


def test_clients_are_deduplicated(client, auth_headers):
    first = client.post("/clients/", json={"name": "Maria", "phone": "+5511999990000"}, headers=auth_headers).json()
    second = client.post("/clients/", json={"name": "MARIA", "phone": ""}, headers=auth_headers).json()
    assert first["id"] == second["id"]

    service = _service(client, auth_headers)
    _book(client, auth_headers, service["id"])
    history = client.get(f"/clients/{first['id']}/history", headers=auth_headers).json()
    assert len(history) == 1


def test_dashboard_summary(client, auth_headers):
    service = _service(client, auth_headers, "Escova", 60, 80.0)
    done = _book(client, auth_headers, service["id"], "10:00").json()
    _book(client, auth_headers, service["id"], "14:00", name="Joana", phone="2")

    client.patch(f"/appointments/{done['id']}", json={"cost": 20.0}, headers=auth_headers)
    client.patch(f"/appointments/{done['id']}/start", headers=auth_headers)
    client.patch(f"/appointments/{done['id']}/finish", json={"payment_method": "dinheiro", "satisfaction_score": 8}, headers=auth_headers)

    client.post("/costs/", json={"title": "Aluguel", "category": "Fixo", "value": 30.0, "date": MONDAY}, headers=auth_headers)

    summary = client.get("/dashboard/summary", params={"start": MONDAY}, headers=auth_headers).json()
    assert summary["total_appointments"] == 2
    assert summary["status"] == {"completed": 1, "confirmed": 1}
    assert summary["revenue_completed"] == 80.0
    assert summary["gross_profit"] == 60.0
    assert summary["expenses"] == {"Fixo": 30.0}
    assert summary["net_result"] == 30.0
    assert summary["average_satisfaction"] == 8
    assert summary["top_services"][0]["name"] == "Escova"
    # 2h ocupadas de 9h de expediente
    assert summary["capacity_minutes"] == 540
    assert summary["occupancy_percent"] == round(120 / 540 * 100, 2)
