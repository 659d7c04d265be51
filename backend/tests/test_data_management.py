from __future__ import annotations

import asyncio

from backend.app import models
from backend.app.services import SalonStore
from backend.app.services.data_management import (
    export_clients,
    export_services,
    import_clients,
    import_services,
)


def _loaded(store: SalonStore) -> SalonStore:
    asyncio.run(store.load())
    return store


def test_import_clients_creates_valid_rows_and_reports_bad_ones(store):
    _loaded(store)
    content = "nom,type,notes\nAlice,femme,Blonde\nBruno,robot,\nChloe,enfant,\n"

    status = asyncio.run(import_clients(store, content))

    assert status.total == 2
    assert status.current == 2
    assert status.success == 2
    assert status.errors == ["Row 3: invalid value for type"]
    names = sorted(client.name for client in store.state.clients)
    assert names == ["Alice", "Chloe"]
    for client in store.state.clients:
        assert client.id
        assert client.last_visit == ""
        assert client.is_favorite is False
    assert store.state.clients[1].notes is None


def test_import_clients_stops_on_missing_headers(store):
    _loaded(store)

    status = asyncio.run(import_clients(store, "prenom\nAlice\n"))

    assert status.total == 0
    assert status.success == 0
    assert status.errors == ["Missing required columns: nom, type"]
    assert store.state.clients == ()


def test_import_continues_when_a_write_fails(failing_gateway, user):
    store = SalonStore(failing_gateway, user)

    status = asyncio.run(import_clients(store, "nom,type\nAlice,femme\nBruno,homme\n"))

    assert status.total == 2
    assert status.current == 2
    assert status.success == 0
    assert status.errors == [
        "Row 2: document store unavailable",
        "Row 3: document store unavailable",
    ]
    assert failing_gateway.calls == ["create", "create"]
    assert store.state.clients == ()


def test_import_services_updates_last_visit(store):
    _loaded(store)
    client = asyncio.run(
        store.add_client(models.Client(name="Alice", type=models.ClientType.ADULT_FEMALE))
    )
    content = (
        "client_id,types,prix,date,duree,produits\n"
        f'{client.id},"coupe, brushing",35,15/03/2024,45,Shampooing\n'
        f'{client.id},soin,"20,5",2024-05-01,,\n'
        f"{client.id},permanente,50,2024-06-01,,\n"
        f"{client.id},coupe,gratuit,2024-06-02,,\n"
    )

    status = asyncio.run(import_services(store, content))

    assert status.success == 2
    assert status.errors == [
        "Row 4: invalid value for types",
        "Row 5: invalid value for prix",
    ]
    first, second = store.state.services
    assert first.types == [models.ServiceType.CUT, models.ServiceType.BLOW_DRY]
    assert first.price == 35.0
    assert first.date == "2024-03-15"
    assert first.duration == 45
    assert first.products == "Shampooing"
    assert second.price == 20.5
    assert second.duration is None
    assert store.get_client(client.id).last_visit == "2024-05-01"


def test_import_services_reports_bad_dates(store):
    _loaded(store)

    status = asyncio.run(
        import_services(store, "client_id,types,prix,date\nabc,coupe,30,2024/01/01\n")
    )

    assert status.total == 0
    assert len(status.errors) == 1
    assert status.errors[0].startswith("Row 2: invalid date format")


def test_export_clients_quotes_every_cell():
    clients = [
        models.Client(
            id="c1",
            name="Alice",
            type=models.ClientType.ADULT_FEMALE,
            notes="Blonde",
            last_visit="2024-03-15",
            is_favorite=True,
        ),
        models.Client(id="c2", name="Bruno", type=models.ClientType.ADULT_MALE),
    ]

    content = export_clients(clients)

    assert content == (
        "id,nom,type,notes,derniere_visite,favori\n"
        '"c1","Alice","femme","Blonde","2024-03-15","oui"\n'
        '"c2","Bruno","homme","","","non"'
    )


def test_export_services_joins_types_and_blanks_missing_duration():
    services = [
        models.Service(
            id="s1",
            client_id="c1",
            types=[models.ServiceType.CUT, models.ServiceType.COLORING],
            price=35.0,
            date="2024-03-15",
            duration=45,
            products="Shampooing",
        ),
        models.Service(
            id="s2",
            client_id="c1",
            types=[models.ServiceType.CARE],
            price=20.5,
            date="2024-04-01",
        ),
    ]

    content = export_services(services)

    assert content == (
        "id,client_id,types,prix,date,duree,produits,notes\n"
        '"s1","c1","coupe, coloration","35","2024-03-15","45","Shampooing",""\n'
        '"s2","c1","soin","20.5","2024-04-01","","",""'
    )


def test_export_of_empty_collections_is_header_only():
    assert export_clients([]) == "id,nom,type,notes,derniere_visite,favori"
    assert export_services([]) == "id,client_id,types,prix,date,duree,produits,notes"


def test_exported_clients_can_be_imported_again(store, gateway):
    _loaded(store)
    for client in (
        models.Client(name="Alice", type=models.ClientType.ADULT_FEMALE, notes="courts, lisses"),
        models.Client(name="Bruno", type=models.ClientType.ADULT_MALE),
        models.Client(name="Chloe", type=models.ClientType.CHILD, notes="Calme"),
    ):
        asyncio.run(store.add_client(client))
    exported = export_clients(store.state.clients)

    other = _loaded(
        SalonStore(gateway, models.UserProfile(id="user-2", email="other@example.com"))
    )
    status = asyncio.run(import_clients(other, exported))

    assert status.success == 3
    assert status.errors == []
    original = [(client.name, client.type, client.notes) for client in store.state.clients]
    restored = [(client.name, client.type, client.notes) for client in other.state.clients]
    assert restored == original
    assert {client.id for client in other.state.clients}.isdisjoint(
        client.id for client in store.state.clients
    )
