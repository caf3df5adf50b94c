from fastapi.testclient import TestClient

from app.services import resolution


MARIA = {"name": "Maria Silva", "phone": "11999990000", "taxId": "123.456.789-00", "address": "Rua A, 10"}


class TestClientsAPI:
    """Casos de teste das rotas /clients."""

    def test_find_or_create_returns_same_id(self, client: TestClient):
        first = client.post("/clients", json=MARIA)
        second = client.post("/clients", json={"name": "Maria Silva", "phone": "11999990000"})

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["id"] == second.json()["id"]

        clients = client.get("/clients").json()
        assert [c["name"] for c in clients] == ["Maria Silva"]
        assert clients[0]["taxId"] == "123.456.789-00"

    def test_create_requires_name_and_phone(self, client: TestClient):
        response = client.post("/clients", json={"name": "", "phone": "1"})
        assert response.status_code == 422
        assert "error" in response.json()

    def test_list_newest_first(self, client: TestClient):
        first = client.post("/clients", json=MARIA).json()["id"]
        second = client.post("/clients", json={"name": "Carlos", "phone": "2100"}).json()["id"]
        assert [c["id"] for c in client.get("/clients").json()] == [second, first]

    def test_show_and_not_found(self, client: TestClient):
        client_id = client.post("/clients", json=MARIA).json()["id"]

        body = client.get(f"/clients/{client_id}").json()
        assert body["name"] == "Maria Silva"
        assert body["address"] == "Rua A, 10"
        assert "createdAt" in body

        response = client.get("/clients/999")
        assert response.status_code == 404
        assert response.json() == {"error": "Cliente não encontrado."}

    def test_update(self, client: TestClient):
        client_id = client.post("/clients", json=MARIA).json()["id"]

        response = client.put(f"/clients/{client_id}", json={
            "name": "Maria S. Silva", "phone": "11999990000", "notes": "Cliente antiga",
        })
        assert response.json() == {"success": True}

        body = client.get(f"/clients/{client_id}").json()
        assert body["name"] == "Maria S. Silva"
        assert body["notes"] == "Cliente antiga"
        assert body["taxId"] is None

    def test_update_to_existing_pair_conflicts(self, client: TestClient):
        client.post("/clients", json=MARIA)
        other_id = client.post("/clients", json={"name": "Carlos", "phone": "2100"}).json()["id"]

        response = client.put(f"/clients/{other_id}", json={"name": "Maria Silva", "phone": "11999990000"})
        assert response.status_code == 409
        assert "nome e telefone" in response.json()["error"]

    def test_update_missing(self, client: TestClient):
        response = client.put("/clients/999", json={"name": "X", "phone": "1"})
        assert response.status_code == 404

    def test_delete_cascades_vehicles(self, client: TestClient):
        client_id = client.post("/clients", json=MARIA).json()["id"]
        vehicle_id = client.post("/vehicles", json={"clientId": client_id, "plate": "ABC1234"}).json()["id"]

        assert client.delete(f"/clients/{client_id}").json() == {"success": True}
        assert client.get(f"/clients/{client_id}").status_code == 404
        assert client.get(f"/vehicles/{vehicle_id}").status_code == 404

    def test_delete_with_invoices_is_forbidden(self, client: TestClient):
        client_id = client.post("/clients", json=MARIA).json()["id"]
        client.post("/invoices", json={"clientId": client_id, "laborCost": 50})

        response = client.delete(f"/clients/{client_id}")
        assert response.status_code == 409
        assert client.get(f"/clients/{client_id}").status_code == 200

    def test_delete_missing(self, client: TestClient):
        assert client.delete("/clients/999").status_code == 404

    def test_client_vehicles(self, client: TestClient):
        client_id = client.post("/clients", json=MARIA).json()["id"]
        client.post("/vehicles", json={"clientId": client_id, "plate": "ABC1234", "model": "Gol"})
        client.post("/vehicles", json={"clientId": client_id, "plate": "XYZ9876", "model": "Fox"})

        vehicles = client.get(f"/clients/{client_id}/vehicles").json()
        assert [v["plate"] for v in vehicles] == ["ABC1234", "XYZ9876"]
        assert client.get("/clients/999/vehicles").status_code == 404

    def test_concurrent_create_returns_existing_id(self, client: TestClient, monkeypatch):
        """Outra requisição grava o mesmo cliente entre a busca e o insert: devolve o id existente."""
        existing_id = client.post("/clients", json=MARIA).json()["id"]

        real_find_client = resolution.find_client
        calls = []

        def misses_once(db, name, phone):
            calls.append(name)
            if len(calls) == 1:
                return None
            return real_find_client(db, name, phone)

        monkeypatch.setattr(resolution, "find_client", misses_once)

        response = client.post("/clients", json=MARIA)
        assert response.status_code == 201, response.text
        assert response.json()["id"] == existing_id
        assert len(calls) == 2
        assert len(client.get("/clients").json()) == 1
