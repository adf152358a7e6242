from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration


def test_me_for_admin(client_for, admin):
    response = client_for(admin).get("/api/v1/staff/me")
    assert response.status_code == 200
    assert response.json() == {"id": "manager", "role": "admin", "is_elevated": True}


def test_me_for_worker(client_for, worker):
    assert client_for(worker).get("/api/v1/staff/me").json()["is_elevated"] is False


def test_deactivated_member_is_forbidden(client_for, make_staff):
    former = make_staff("former", is_active=False)
    assert client_for(former).get("/api/v1/staff/me").status_code == 403


def test_superuser_without_profile_acts_as_superadmin(api_client, django_user_model):
    root = django_user_model.objects.create_superuser(username="root", password="x")
    api_client.force_authenticate(user=root)
    assert api_client.get("/api/v1/staff/me").json()["role"] == "superadmin"


def test_worker_directory_lists_active_workers(client_for, admin, worker, other_worker, make_staff):
    make_staff("former", is_active=False)
    response = client_for(admin).get("/api/v1/staff/workers")
    assert response.status_code == 200
    assert sorted(w["username"] for w in response.json()) == ["meera", "ravi"]


def test_obtain_jwt_token(api_client, worker):
    response = api_client.post(
        "/api/v1/auth/token/",
        {"username": "ravi", "password": "testpass123"},
        format="json",
    )
    assert response.status_code == 200
    access = response.json()["access"]

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    assert api_client.get("/api/v1/staff/me").json()["id"] == "ravi"
