from __future__ import annotations

from fastapi.testclient import TestClient

from backend.app.main import app


def _create_client(client, **overrides):
    payload = {"name": "Alice", "type": "femme", "notes": "Blonde"}
    payload.update(overrides)
    response = client.post("/clients/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _create_service(client, client_id, **overrides):
    payload = {
        "client_id": client_id,
        "types": ["coupe", "brushing"],
        "price": 35,
        "date": "2024-03-15",
        "duration": 30,
    }
    payload.update(overrides)
    response = client.post("/services/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_health_check(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_requests_without_token_are_rejected():
    anonymous = TestClient(app)

    response = anonymous.get("/clients/")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_read_current_user(client, user):
    response = client.get("/auth/me")

    assert response.status_code == 200
    assert response.json() == {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
    }


def test_create_and_list_clients(client):
    created = _create_client(client)
    _create_client(client, name="bruno", type="homme", notes=None)

    assert created["type"] == "femme"
    assert created["last_visit"] == ""
    assert created["is_favorite"] is False

    response = client.get("/clients/")
    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["Alice", "bruno"]

    response = client.get("/clients/", params={"search": "BRU"})
    assert [item["name"] for item in response.json()] == ["bruno"]


def test_create_client_validation(client):
    blank = client.post("/clients/", json={"name": "   ", "type": "femme"})
    assert blank.status_code == 400
    assert blank.json()["detail"] == "Client name is required"

    unknown_type = client.post("/clients/", json={"name": "Alice", "type": "robot"})
    assert unknown_type.status_code == 422


def test_update_and_delete_client(client):
    created = _create_client(client)

    response = client.put(f"/clients/{created['id']}", json={"name": "Alice Martin"})
    assert response.status_code == 200
    assert response.json()["name"] == "Alice Martin"
    assert response.json()["notes"] == "Blonde"

    response = client.delete(f"/clients/{created['id']}")
    assert response.status_code == 204

    assert client.get(f"/clients/{created['id']}").status_code == 404
    assert client.delete(f"/clients/{created['id']}").status_code == 404


def test_toggle_favorite(client):
    created = _create_client(client)
    _create_client(client, name="Bruno", type="homme")

    response = client.post(f"/clients/{created['id']}/favorite")
    assert response.status_code == 200
    assert response.json()["is_favorite"] is True

    favourites = client.get("/clients/", params={"favorites_only": True}).json()
    assert [item["id"] for item in favourites] == [created["id"]]

    assert client.post("/clients/unknown/favorite").status_code == 404


def test_services_keep_client_last_visit_in_sync(client):
    owner = _create_client(client)
    first = _create_service(client, owner["id"])
    _create_service(client, owner["id"], date="2024-01-05", types=["soin"], duration=None)

    detail = client.get(f"/clients/{owner['id']}").json()
    assert detail["last_visit"] == "2024-03-15"
    assert [service["date"] for service in detail["services"]] == ["2024-03-15", "2024-01-05"]
    assert detail["services"][0]["types"] == ["coupe", "brushing"]
    assert detail["services"][0]["price"] == 35.0

    response = client.put(f"/services/{first['id']}", json={"date": "2024-04-01"})
    assert response.status_code == 200
    assert client.get(f"/clients/{owner['id']}").json()["last_visit"] == "2024-04-01"

    assert client.delete(f"/services/{first['id']}").status_code == 204
    assert client.get(f"/clients/{owner['id']}").json()["last_visit"] == "2024-01-05"

    listed = client.get("/services/", params={"client_id": owner["id"]}).json()
    assert [service["date"] for service in listed] == ["2024-01-05"]


def test_service_validation_and_missing_records(client):
    owner = _create_client(client)

    negative = client.post(
        "/services/",
        json={"client_id": owner["id"], "types": ["coupe"], "price": -1, "date": "2024-01-01"},
    )
    assert negative.status_code == 400
    assert negative.json()["detail"] == "Price must be a positive number"

    no_types = client.post(
        "/services/",
        json={"client_id": owner["id"], "types": [], "price": 10, "date": "2024-01-01"},
    )
    assert no_types.status_code == 400

    french_date = client.post(
        "/services/",
        json={"client_id": owner["id"], "types": ["coupe"], "price": 10, "date": "15/03/2023"},
    )
    assert french_date.status_code == 400
    assert french_date.json()["detail"] == "Invalid date"
    assert client.get("/services/", params={"client_id": owner["id"]}).json() == []
    assert client.get(f"/clients/{owner['id']}").json()["last_visit"] == ""

    assert client.put("/services/unknown", json={"price": 10}).status_code == 404
    assert client.delete("/services/unknown").status_code == 404


def test_settings_defaults_and_update(client):
    response = client.get("/settings/")
    assert response.status_code == 200
    assert response.json()["name"] == "MonSalon"
    assert response.json()["id"]

    response = client.put(
        "/settings/",
        json={"name": "Salon Rose", "city": "Lyon", "postal_code": "69001", "phone": "0612345678"},
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Salon Rose"
    assert response.json()["postal_code"] == "69001"

    invalid = client.put("/settings/", json={"name": "Salon Rose", "phone": "06 12"})
    assert invalid.status_code == 400
    assert client.get("/settings/").json()["phone"] == "0612345678"


def test_import_and_export_clients(client):
    response = client.post(
        "/data/clients/import",
        json={
            "filename": "clients.csv",
            "content": "nom;type;notes\nAlice;femme;Blonde\nBruno;chat;\n",
        },
    )
    assert response.status_code == 200
    assert response.json() == {
        "total": 1,
        "current": 1,
        "success": 1,
        "errors": ["Row 3: invalid value for type"],
    }

    export = client.get("/data/clients/export")
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert "clients.csv" in export.headers["content-disposition"]
    lines = export.text.split("\n")
    assert lines[0] == "id,nom,type,notes,derniere_visite,favori"
    assert lines[1].endswith('"Alice","femme","Blonde","","non"')


def test_import_services_and_export(client):
    owner = _create_client(client)
    content = f"client_id,types,prix,date\n{owner['id']},coupe,25,01/02/2024\n"

    response = client.post("/data/services/import", json={"content": content})
    assert response.status_code == 200
    assert response.json()["success"] == 1

    assert client.get(f"/clients/{owner['id']}").json()["last_visit"] == "2024-02-01"

    export = client.get("/data/services/export")
    assert "prestations.csv" in export.headers["content-disposition"]
    lines = export.text.split("\n")
    assert lines[0] == "id,client_id,types,prix,date,duree,produits,notes"
    assert f'"{owner["id"]}","coupe","25","2024-02-01","","",""' in lines[1]


def test_import_rejects_blank_content(client):
    response = client.post("/data/clients/import", json={"content": "   "})

    assert response.status_code == 400


def test_logout_closes_the_session_store(client):
    _create_client(client)

    first = client.post("/auth/logout")
    second = client.post("/auth/logout")

    assert first.json() == {"closed": True}
    assert second.json() == {"closed": False}
    # A new request reopens the store from persisted documents.
    assert [item["name"] for item in client.get("/clients/").json()] == ["Alice"]
