from datetime import date, timedelta

from fuel_procurement.tests.factories import auth_headers, future

API = "/api/v1"


def _boq_payload(**overrides):
    body = {
        "fuel_type": "Diesel",
        "description": "Monthly diesel",
        "quantity": "1000",
        "unit": "Liters",
        "estimated_price_per_unit": "1200",
        "deadline": future().isoformat(),
    }
    body.update(overrides)
    return body


def _create_boq(client, admin, **overrides):
    r = client.post(f"{API}/boq", json=_boq_payload(**overrides), headers=auth_headers(admin))
    assert r.status_code == 201, r.text
    return r.json()


def test_full_procurement_flow(client, admin, supplier1, supplier2):
    boq = _create_boq(client, admin)
    assert boq["status"] == "open"

    r1 = client.post(
        f"{API}/boq/{boq['id']}/bids",
        json={"bid_price_per_unit": "1150", "qualifications": "ISO 9001, HSE", "total_price": "1"},
        headers=auth_headers(supplier1),
    )
    assert r1.status_code == 201, r1.text
    bid1 = r1.json()
    assert bid1["supplier_id"] == str(supplier1.id)
    assert bid1["qualifications"] == ["ISO 9001", "HSE"]
    assert float(bid1["total_price"]) == 1150000

    r2 = client.post(
        f"{API}/boq/{boq['id']}/bids",
        json={"bid_price_per_unit": "1180"},
        headers=auth_headers(supplier2),
    )
    assert r2.status_code == 201

    ev = client.post(f"{API}/boq/{boq['id']}/evaluate", json={}, headers=auth_headers(admin))
    assert ev.status_code == 200, ev.text
    body = ev.json()
    assert body["winner"]["id"] == bid1["id"]
    assert body["supplier"]["email"] == supplier1.email
    assert body["total_bids"] == 2
    assert body["is_final"] is False

    sel = client.post(
        f"{API}/boq/{boq['id']}/selection",
        json={"supplier_id": str(supplier1.id)},
        headers=auth_headers(admin),
    )
    assert sel.status_code == 201, sel.text
    assert sel.json()["bid_id"] == bid1["id"]
    assert sel.json()["notification_status"] == "logged"

    again = client.post(
        f"{API}/boq/{boq['id']}/selection",
        json={"supplier_id": str(supplier2.id)},
        headers=auth_headers(admin),
    )
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "already_selected"

    late = client.post(
        f"{API}/boq/{boq['id']}/bids",
        json={"bid_price_per_unit": "900"},
        headers=auth_headers(supplier2),
    )
    assert late.status_code == 409
    assert late.json()["detail"]["code"] == "bidding_closed"

    got = client.get(f"{API}/boq/{boq['id']}", headers=auth_headers(admin))
    assert got.json()["status"] == "selected"

    current = client.get(f"{API}/boq/{boq['id']}/selection", headers=auth_headers(admin))
    assert current.status_code == 200
    assert current.json()["supplier_id"] == str(supplier1.id)


def test_create_boq_validation(client, admin):
    r = client.post(f"{API}/boq", json=_boq_payload(quantity="0"), headers=auth_headers(admin))
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "validation_error"

    r = client.post(
        f"{API}/boq",
        json=_boq_payload(deadline=(date.today() - timedelta(days=1)).isoformat()),
        headers=auth_headers(admin),
    )
    assert r.status_code == 400

    r = client.post(f"{API}/boq", json=_boq_payload(fuel_type="Kerosene"), headers=auth_headers(admin))
    assert r.status_code == 400

    r = client.post(f"{API}/boq", json=_boq_payload(colour="red"), headers=auth_headers(admin))
    assert r.status_code == 400


def test_supplier_cannot_manage_boq(client, supplier1):
    r = client.post(f"{API}/boq", json=_boq_payload(), headers=auth_headers(supplier1))
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "forbidden"


def test_bid_body_cannot_name_supplier(client, admin, supplier1, supplier2):
    boq = _create_boq(client, admin)
    r = client.post(
        f"{API}/boq/{boq['id']}/bids",
        json={"bid_price_per_unit": "1150", "supplier_id": str(supplier2.id)},
        headers=auth_headers(supplier1),
    )
    assert r.status_code == 400


def test_bid_failures(client, admin, supplier1):
    missing = client.post(
        f"{API}/boq/00000000-0000-0000-0000-000000000000/bids",
        json={"bid_price_per_unit": "1"},
        headers=auth_headers(supplier1),
    )
    assert missing.status_code == 404

    boq = _create_boq(client, admin)
    zero = client.post(
        f"{API}/boq/{boq['id']}/bids", json={"bid_price_per_unit": "0"}, headers=auth_headers(supplier1)
    )
    assert zero.status_code == 400

    client.post(f"{API}/boq/{boq['id']}/bids", json={"bid_price_per_unit": "5"}, headers=auth_headers(supplier1))
    dup = client.post(
        f"{API}/boq/{boq['id']}/bids", json={"bid_price_per_unit": "4"}, headers=auth_headers(supplier1)
    )
    assert dup.status_code == 409
    assert dup.json()["detail"]["code"] == "duplicate_bid"


def test_evaluate_distinguishes_no_bids_from_no_qualifying(client, admin, supplier1):
    boq = _create_boq(client, admin)

    empty = client.post(f"{API}/boq/{boq['id']}/evaluate", headers=auth_headers(admin))
    assert empty.status_code == 404
    assert empty.json()["detail"]["code"] == "no_bids"

    client.post(f"{API}/boq/{boq['id']}/bids", json={"bid_price_per_unit": "5"}, headers=auth_headers(supplier1))
    strict = client.post(
        f"{API}/boq/{boq['id']}/evaluate",
        json={"required_quality_certificates": "EN 590"},
        headers=auth_headers(admin),
    )
    assert strict.status_code == 404
    assert strict.json()["detail"]["code"] == "no_qualifying_bid"

    unknown = client.post(
        f"{API}/boq/00000000-0000-0000-0000-000000000000/evaluate", headers=auth_headers(admin)
    )
    assert unknown.status_code == 404
    assert unknown.json()["detail"]["code"] == "not_found"


def test_delete_policy(client, admin, supplier1):
    empty = _create_boq(client, admin)
    assert client.delete(f"{API}/boq/{empty['id']}", headers=auth_headers(admin)).status_code == 204
    assert client.get(f"{API}/boq/{empty['id']}", headers=auth_headers(admin)).status_code == 404

    busy = _create_boq(client, admin)
    client.post(f"{API}/boq/{busy['id']}/bids", json={"bid_price_per_unit": "5"}, headers=auth_headers(supplier1))
    r = client.delete(f"{API}/boq/{busy['id']}", headers=auth_headers(admin))
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "boq_has_bids"


def test_update_recomputes_totals(client, admin, supplier1):
    boq = _create_boq(client, admin)
    client.post(f"{API}/boq/{boq['id']}/bids", json={"bid_price_per_unit": "2"}, headers=auth_headers(supplier1))

    r = client.put(f"{API}/boq/{boq['id']}", json={"quantity": "250.5"}, headers=auth_headers(admin))
    assert r.status_code == 200, r.text

    bids = client.get(f"{API}/boq/{boq['id']}/bids", headers=auth_headers(admin)).json()
    assert float(bids["items"][0]["total_price"]) == 501.0


def test_bid_views(client, admin, manager, supplier1, supplier2):
    boq = _create_boq(client, admin)
    client.post(f"{API}/boq/{boq['id']}/bids", json={"bid_price_per_unit": "5"}, headers=auth_headers(supplier1))
    client.post(f"{API}/boq/{boq['id']}/bids", json={"bid_price_per_unit": "6"}, headers=auth_headers(supplier2))

    as_manager = client.get(f"{API}/boq/{boq['id']}/bids", headers=auth_headers(manager))
    assert as_manager.status_code == 200
    assert as_manager.json()["count"] == 2

    assert client.get(f"{API}/boq/{boq['id']}/bids", headers=auth_headers(supplier1)).status_code == 403

    everything = client.get(f"{API}/bids", headers=auth_headers(admin)).json()
    assert everything["count"] == 2
    assert {row["supplier_name"] for row in everything["items"]} == {"supplier1", "supplier2"}
    assert everything["items"][0]["fuel_type"] == "Diesel"

    mine = client.get(f"{API}/bids/my", headers=auth_headers(supplier2)).json()
    assert [b["supplier_id"] for b in mine["items"]] == [str(supplier2.id)]


def test_idempotent_bid_resubmission(client, admin, supplier1):
    boq = _create_boq(client, admin)
    headers = {**auth_headers(supplier1), "Idempotency-Key": "bid-1"}
    url = f"{API}/boq/{boq['id']}/bids"

    first = client.post(url, json={"bid_price_per_unit": "5"}, headers=headers)
    second = client.post(url, json={"bid_price_per_unit": "5"}, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.json()["id"] == first.json()["id"]
    assert second.headers.get("Idempotent-Replayed") == "true"

    changed = client.post(url, json={"bid_price_per_unit": "6"}, headers=headers)
    assert changed.status_code == 409
