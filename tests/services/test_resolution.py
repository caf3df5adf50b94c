import pytest
from sqlalchemy.orm import Session

from app.database_models import Client, Vehicle
from app.errors import ValidationError
from app.services.resolution import find_client, find_or_create_client, find_or_create_vehicle


class TestFindOrCreateClient:
    """Casos de teste do find-or-create de clientes."""

    def test_same_name_and_phone_returns_same_client(self, db: Session):
        first = find_or_create_client(db, "Maria Silva", "11999990000")
        db.commit()
        second = find_or_create_client(db, "Maria Silva", "11999990000")
        db.commit()

        assert first.id == second.id
        assert db.query(Client).count() == 1

    def test_reuse_does_not_update_other_fields(self, db: Session):
        find_or_create_client(db, "Maria Silva", "11999990000", address="Rua A")
        db.commit()
        client = find_or_create_client(db, "Maria Silva", "11999990000", address="Rua B")

        assert client.address == "Rua A"

    def test_whitespace_is_ignored_in_lookup(self, db: Session):
        first = find_or_create_client(db, "Maria Silva", "11999990000")
        second = find_or_create_client(db, "  Maria Silva ", " 11999990000")
        assert first.id == second.id

    def test_different_phone_creates_new_client(self, db: Session):
        find_or_create_client(db, "Maria Silva", "11999990000")
        find_or_create_client(db, "Maria Silva", "11888880000")
        db.commit()
        assert db.query(Client).count() == 2

    def test_requires_name_and_phone(self, db: Session):
        with pytest.raises(ValidationError):
            find_or_create_client(db, "", "123")
        with pytest.raises(ValidationError):
            find_or_create_client(db, "Maria", "   ")

    def test_find_client(self, db: Session):
        assert find_client(db, "Ninguém", "000") is None
        created = find_or_create_client(db, "Maria Silva", "11999990000")
        db.commit()
        assert find_client(db, "Maria Silva", "11999990000").id == created.id


class TestFindOrCreateVehicle:
    """Casos de teste do find-or-create de veículos."""

    def test_matches_on_plate_and_model(self, db: Session, maria: Client):
        first = find_or_create_vehicle(db, maria.id, "abc1234", "Gol", "VW", "2010")
        second = find_or_create_vehicle(db, maria.id, "ABC1234", "Gol")
        db.commit()

        assert first.id == second.id
        assert first.plate == "ABC1234"
        assert db.query(Vehicle).count() == 1

    def test_empty_plate_matches_empty_plate(self, db: Session, maria: Client):
        first = find_or_create_vehicle(db, maria.id, None, "Uno")
        second = find_or_create_vehicle(db, maria.id, "", "Uno")
        assert first.id == second.id

    def test_vehicles_are_scoped_to_owner(self, db: Session, maria: Client):
        other = Client(name="Pedro", phone="2100")
        db.add(other)
        db.commit()

        mine = find_or_create_vehicle(db, maria.id, "ABC1234", "Gol")
        theirs = find_or_create_vehicle(db, other.id, "ABC1234", "Gol")
        assert mine.id != theirs.id

    def test_unknown_client(self, db: Session):
        with pytest.raises(ValidationError):
            find_or_create_vehicle(db, 999, "ABC1234", "Gol")

    def test_deleting_client_deletes_vehicles(self, db: Session, maria: Client):
        find_or_create_vehicle(db, maria.id, "ABC1234", "Gol")
        db.commit()

        db.delete(maria)
        db.commit()
        assert db.query(Vehicle).count() == 0
