from jerp import db
from jerp.actions import (
    create_client_action,
    create_item_action,
    delete_item_action,
    get_clients_action,
    get_item_by_id_action,
    get_items_action,
    onboarding_action,
    update_item_action,
)
from jerp.item_form import ItemForm


def _filled_form(client_id=None):
    form = ItemForm()
    form.set_field("name", "Kundan ring")
    form.set_field("date", "2025-05-10")
    form.set_field("carate", "22K")
    form.set_field("gross_weight", "5")
    diamond = form.add_inclusion("diamonds")
    form.update_inclusion("diamonds", diamond.id, "weight", "0.5")
    form.update_inclusion("diamonds", diamond.id, "pieces", "4")
    stone = form.add_inclusion("stones")
    form.update_inclusion("stones", stone.id, "weight", "1")
    form.update_inclusion("stones", stone.id, "pieces", "1")
    form.set_field("percentage", "91.6")
    form.set_client(client_id)
    return form


def test_onboarding_action_saves_profile(conn):
    result = onboarding_action(conn, {"name": "Asha Patel", "phone_number": "9876543210"})
    assert result.success
    assert result.data.name == "Asha Patel"
    assert db.get_profile(conn).onboarding_completed is True


def test_onboarding_action_reports_field_errors(conn):
    result = onboarding_action(conn, {"name": "A", "phone_number": "123"})
    assert not result.success
    assert result.error == "Name must be at least 2 characters"
    assert set(result.field_errors) == {"name", "phone_number"}
    assert db.get_profile(conn) is None


def test_create_client_action(conn):
    result = create_client_action(conn, {"name": "Meera", "phone": "9988776655", "email": ""})
    assert result.success
    assert result.data["name"] == "Meera"
    assert result.data["email"] is None

    listed = get_clients_action(conn)
    assert listed.success
    assert [row["name"] for row in listed.data] == ["Meera"]


def test_create_client_action_rejects_invalid_input(conn):
    result = create_client_action(conn, {"name": "", "phone": "abc"})
    assert not result.success
    assert result.field_errors == {"name": "Name is required", "phone": "Please enter a valid phone number"}
    assert get_clients_action(conn).data == []


def test_create_item_action_stores_computed_values(conn):
    client = create_client_action(conn, {"name": "Meera", "phone": "9988776655"}).data
    result = create_item_action(conn, _filled_form(client["id"]).to_payload())

    assert result.success
    item = result.data
    assert item["item_id"].startswith("ITEM-")
    assert item["net_weight"] == 5.6
    assert item["fine"] == 5.13
    assert item["percentage"] == 91.6
    assert item["making"] is None
    assert item["description"] is None
    assert item["client_name"] == "Meera"
    assert item["diamonds"][0]["weight"] == "0.5"
    assert item["stones"][0]["pieces"] == "1"


def test_create_item_action_requires_fields(conn):
    result = create_item_action(conn, ItemForm().to_payload())
    assert not result.success
    assert result.error == "Item name is required"
    assert "gross_weight" in result.field_errors
    assert get_items_action(conn).data == []


def test_get_item_by_id_action(conn):
    created = create_item_action(conn, _filled_form().to_payload()).data

    found = get_item_by_id_action(conn, created["id"])
    assert found.success
    assert found.data["name"] == "Kundan ring"

    missing = get_item_by_id_action(conn, 999)
    assert not missing.success
    assert missing.error == "Item not found"


def test_update_item_action_is_partial(conn):
    created = create_item_action(conn, _filled_form().to_payload()).data

    result = update_item_action(conn, created["id"], {"name": "Kundan band", "making": "350"})
    assert result.success
    assert result.data["name"] == "Kundan band"
    assert result.data["making"] == 350.0
    assert result.data["net_weight"] == 5.6


def test_update_item_action_validates_supplied_fields(conn):
    created = create_item_action(conn, _filled_form().to_payload()).data

    result = update_item_action(conn, created["id"], {"gross_weight": "0"})
    assert not result.success
    assert result.field_errors == {"gross_weight": "Gross weight must be a positive number"}
    assert get_item_by_id_action(conn, created["id"]).data["gross_weight"] == 5.0


def test_update_item_action_missing_item(conn):
    result = update_item_action(conn, 404, {"name": "Ghost"})
    assert not result.success
    assert result.error == "Item not found"


def test_delete_item_action(conn):
    created = create_item_action(conn, _filled_form().to_payload()).data

    assert delete_item_action(conn, created["id"]).success
    second = delete_item_action(conn, created["id"])
    assert not second.success
    assert second.error == "Item not found"


def test_database_failures_become_generic_errors(conn):
    conn.close()

    items = get_items_action(conn)
    assert not items.success
    assert items.error == "Failed to fetch items"
    assert items.data == []

    clients = get_clients_action(conn)
    assert clients.error == "Failed to fetch clients"

    onboarding = onboarding_action(conn, {"name": "Asha Patel", "phone_number": "9876543210"})
    assert onboarding.error == "Failed to save user data to database"


def test_item_actions_reject_bad_client_reference(conn):
    payload = _filled_form().to_payload()
    payload["client_id"] = "abc"

    created = create_item_action(conn, payload)
    assert not created.success
    assert created.field_errors == {"client_id": "Please select a valid client"}

    item_pk = create_item_action(conn, _filled_form().to_payload()).data["id"]
    updated = update_item_action(conn, item_pk, {"client_id": "abc"})
    assert not updated.success
    assert updated.error == "Please select a valid client"
