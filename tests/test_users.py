from tests.conftest import auth_headers


def test_admin_lists_active_trainers_by_name(client, db, seed_users):
    seed_users["meera"].is_active = False
    db.commit()

    resp = client.get("/api/users/trainers", headers=auth_headers(client, "admin@example.com"))
    assert resp.status_code == 200
    assert [u["full_name"] for u in resp.json()] == ["Asha Rao", "Ravi Kumar"]
    assert set(resp.json()[0]) == {"user_id", "full_name", "email"}


def test_trainer_cannot_list_trainers(client, seed_users):
    resp = client.get("/api/users/trainers", headers=auth_headers(client, "asha@example.com"))
    assert resp.status_code == 403
