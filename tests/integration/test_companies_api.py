# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Integration tests for company endpoints."""

import uuid

from src.models import Company


class TestCompanyList:
    """Tests for GET /api/v1/companies."""

    def test_requires_authentication(self, client):
        assert client.get("/api/v1/companies").status_code == 401

    def test_sorted_by_name(self, authenticated_client, db_session):
        db_session.add_all(
            [
                Company(business_name="Zeta Ltd"),
                Company(business_name="Alpha Inc", is_active=False),
            ]
        )
        db_session.commit()

        response = authenticated_client.get("/api/v1/companies")

        assert response.status_code == 200
        assert [c["business_name"] for c in response.json()] == [
            "Alpha Inc",
            "Zeta Ltd",
        ]

    def test_active_only(self, authenticated_client, db_session):
        db_session.add_all(
            [
                Company(business_name="Zeta Ltd"),
                Company(business_name="Alpha Inc", is_active=False),
            ]
        )
        db_session.commit()

        response = authenticated_client.get("/api/v1/companies?active_only=true")

        assert [c["business_name"] for c in response.json()] == ["Zeta Ltd"]


class TestCompanyMutations:
    """Tests for creating, updating and deleting companies."""

    def test_create(self, admin_client):
        response = admin_client.post(
            "/api/v1/companies",
            json={"business_name": "Initech", "tax_id": "INI-42"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["business_name"] == "Initech"
        assert data["is_active"] is True

    def test_viewer_cannot_create(self, authenticated_client):
        response = authenticated_client.post(
            "/api/v1/companies", json={"business_name": "Initech"}
        )
        assert response.status_code == 403

    def test_blank_name_rejected(self, admin_client):
        response = admin_client.post("/api/v1/companies", json={"business_name": ""})
        assert response.status_code == 422

    def test_partial_update(self, admin_client, company):
        response = admin_client.put(
            f"/api/v1/companies/{company.id}", json={"is_active": False}
        )

        assert response.status_code == 200
        assert response.json()["business_name"] == "Acme Corp"
        assert response.json()["is_active"] is False

    def test_delete(self, admin_client, company):
        response = admin_client.delete(f"/api/v1/companies/{company.id}")

        assert response.status_code == 204
        assert admin_client.get(f"/api/v1/companies/{company.id}").status_code == 404

    def test_unknown_company(self, admin_client):
        response = admin_client.put(
            f"/api/v1/companies/{uuid.uuid4()}", json={"business_name": "X"}
        )
        assert response.status_code == 404
