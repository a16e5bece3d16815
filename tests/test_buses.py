from src.models import Booking, Bus

API = "/api/v1"


def small_layout(rows=2):
    arrangement = [
        [f"{row:02d}A", f"{row:02d}B", "", f"{row:02d}C", f"{row:02d}D"]
        for row in range(1, rows + 1)
    ]
    return {"rows": rows, "columns": 5, "arrangement": arrangement}


def _create_type(client, headers, name="8 Seater", seats=8):
    r = client.post(f"{API}/bus-types", json={"name": name, "seats": seats}, headers=headers)
    assert r.status_code == 201
    return r.json()


def _bus_payload(**overrides):
    data = {
        "operator": "Kadzai Express",
        "busType": "8 Seater",
        "seatLayout": small_layout(),
        "amenities": ["AC", "WiFi"],
        "rating": 4.5,
    }
    data.update(overrides)
    return data


# Bus types

def test_bus_type_duplicate_name(client, admin_headers):
    _create_type(client, admin_headers)
    r = client.post(f"{API}/bus-types", json={"name": "8 Seater", "seats": 8}, headers=admin_headers)
    assert r.status_code == 409


def test_bus_type_requires_positive_seats(client, admin_headers):
    r = client.post(f"{API}/bus-types", json={"name": "Broken", "seats": 0}, headers=admin_headers)
    assert r.status_code == 400


def test_bus_type_rename_cascades_to_buses(client, db, admin_headers):
    bus_type = _create_type(client, admin_headers)
    bus = client.post(f"{API}/buses", json=_bus_payload(), headers=admin_headers).json()

    r = client.patch(f"{API}/bus-types/{bus_type['id']}", json={"name": "Mini Coach"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Mini Coach"

    r = client.get(f"{API}/buses/{bus['id']}", headers=admin_headers)
    assert r.json()["busType"] == "Mini Coach"


def test_bus_type_rename_to_existing_name(client, admin_headers):
    _create_type(client, admin_headers)
    other = _create_type(client, admin_headers, name="48 Seater", seats=48)
    r = client.patch(f"{API}/bus-types/{other['id']}", json={"name": "8 Seater"}, headers=admin_headers)
    assert r.status_code == 409


def test_bus_type_in_use_cannot_be_deleted(client, admin_headers):
    bus_type = _create_type(client, admin_headers)
    client.post(f"{API}/buses", json=_bus_payload(), headers=admin_headers)

    r = client.delete(f"{API}/bus-types/{bus_type['id']}", headers=admin_headers)
    assert r.status_code == 409


def test_unused_bus_type_deleted(client, admin_headers):
    bus_type = _create_type(client, admin_headers)
    assert client.delete(f"{API}/bus-types/{bus_type['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"{API}/bus-types", headers=admin_headers).json()["data"] == []


# Buses

def test_create_bus_materializes_seats(client, admin_headers):
    _create_type(client, admin_headers)
    r = client.post(f"{API}/buses", json=_bus_payload(), headers=admin_headers)
    assert r.status_code == 201
    body = r.json()
    assert body["busType"] == "8 Seater"
    assert sorted(seat["number"] for seat in body["seats"]) == [
        "01A", "01B", "01C", "01D", "02A", "02B", "02C", "02D"
    ]
    assert all(seat["isAvailable"] for seat in body["seats"])


def test_create_bus_unknown_type(client, admin_headers):
    r = client.post(f"{API}/buses", json=_bus_payload(busType="Nope"), headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Invalid bus type"


def test_create_bus_seat_count_mismatch(client, admin_headers):
    _create_type(client, admin_headers)
    r = client.post(f"{API}/buses", json=_bus_payload(seatLayout=small_layout(rows=3)), headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Seat count (12) does not match bus type (8)"


def test_create_bus_duplicate_seat_numbers(client, admin_headers):
    _create_type(client, admin_headers)
    layout = {
        "rows": 2,
        "columns": 5,
        "arrangement": [["01A", "01B", "", "01C", "01D"], ["01A", "02B", "", "02C", "02D"]],
    }
    r = client.post(f"{API}/buses", json=_bus_payload(seatLayout=layout), headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Duplicate seat numbers"


def test_list_buses_filters(client, admin_headers):
    _create_type(client, admin_headers)
    client.post(f"{API}/buses", json=_bus_payload(), headers=admin_headers)
    client.post(f"{API}/buses", json=_bus_payload(operator="Peace Mass Transit"), headers=admin_headers)

    r = client.get(f"{API}/buses", params={"operator": "kadzai"}, headers=admin_headers)
    assert r.json()["total"] == 1
    assert r.json()["data"][0]["operator"] == "Kadzai Express"

    r = client.get(f"{API}/buses", params={"busType": "8 Seater"}, headers=admin_headers)
    assert r.json()["total"] == 2


def test_replace_layout_resets_seats(client, db, admin_headers, make_bus):
    bus = make_bus()
    layout = {
        "rows": 2,
        "columns": 5,
        "arrangement": [["1", "2", "", "3", "4"], ["5", "6", "", "7", "8"]],
    }
    r = client.patch(f"{API}/buses/{bus.id}", json={"seatLayout": layout}, headers=admin_headers)
    assert r.status_code == 200
    assert sorted(seat["number"] for seat in r.json()["seats"]) == ["1", "2", "3", "4", "5", "6", "7", "8"]


def test_replace_layout_refused_with_open_bookings(client, db, admin_headers, make_bus, make_trip):
    bus = make_bus()
    trip = make_trip(bus)
    db.add(Booking(
        reference="TEAAAA0001",
        status="confirmed",
        trip_id=trip.id,
        bus_id=bus.id,
        from_location=trip.from_location,
        to_location=trip.to_location,
        date=trip.date.isoformat(),
        time=trip.departure_time,
        operator=bus.operator,
        email="ada@example.com",
        phone="+2348011112222",
        total_amount=5000.0,
        booking_date=trip.date.isoformat(),
    ))
    db.commit()

    r = client.patch(f"{API}/buses/{bus.id}", json={"seatLayout": small_layout()}, headers=admin_headers)
    assert r.status_code == 409


def test_change_bus_type_needs_matching_seat_count(client, admin_headers, make_bus):
    bus = make_bus()
    _create_type(client, admin_headers, name="48 Seater", seats=48)
    r = client.patch(f"{API}/buses/{bus.id}", json={"busType": "48 Seater"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Seat count (8) does not match bus type (48)"


def test_update_bus_rating_and_operator(client, admin_headers, make_bus):
    bus = make_bus()
    r = client.patch(f"{API}/buses/{bus.id}", json={"operator": "ABC Transport", "rating": 3.5}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["operator"] == "ABC Transport"
    assert r.json()["rating"] == 3.5


def test_delete_bus_with_active_trip_refused(client, admin_headers, make_bus, make_trip):
    bus = make_bus()
    make_trip(bus)
    r = client.delete(f"{API}/buses/{bus.id}", headers=admin_headers)
    assert r.status_code == 409
    assert r.json()["error"]["message"] == "Cannot delete bus with active trips or bookings"


def test_delete_idle_bus(client, db, admin_headers, make_bus, make_trip):
    bus = make_bus()
    make_trip(bus, is_available=False)
    r = client.delete(f"{API}/buses/{bus.id}", headers=admin_headers)
    assert r.status_code == 200
    db.expire_all()
    assert db.query(Bus).filter(Bus.id == bus.id).first() is None
