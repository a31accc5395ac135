"""Integration tests for Invoice API endpoints"""

import pytest
from datetime import date
from decimal import Decimal
from httpx import AsyncClient

OWNER = {"X-Owner-ID": "7"}
OTHER_OWNER = {"X-Owner-ID": "8"}

PAYLOAD = {
    "company_id": 12,
    "invoice_date": "2024-02-01",
    "opening": "Thank you",
    "positions": [
        {"text": "Consulting", "quantity": "1", "unit_code": "HUR", "tax_rate": "19", "net_price": "100.00"},
        {"text": "Book", "quantity": 2, "unit_code": "C62", "tax_rate": "7", "net_price": "50"},
    ],
}


async def create_invoice(client: AsyncClient, headers=OWNER) -> dict:
    response = await client.post("/api/invoices", json=PAYLOAD, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def set_status(client: AsyncClient, invoice_id: int, status: str, headers=OWNER):
    return await client.post(f"/api/invoices/{invoice_id}/status", json={"status": status}, headers=headers)


class TestInvoiceAPIIntegration:
    """Integration test suite for Invoice API endpoints"""

    @pytest.mark.asyncio
    async def test_create_invoice(self, client: AsyncClient):
        data = await create_invoice(client)

        assert data["status"] == "draft"
        assert data["counter"] == 1
        assert data["number"] == f"{date.today().year}-0001"
        assert data["currency"] == "EUR"
        assert Decimal(data["net_total"]) == Decimal("200")
        assert Decimal(data["gross_total"]) == Decimal("226")
        assert [Decimal(t["rate"]) for t in data["tax_amounts"]] == [Decimal("7"), Decimal("19")]
        assert [p["position"] for p in data["positions"]] == [1, 2]

    @pytest.mark.asyncio
    async def test_owner_header_is_required(self, client: AsyncClient):
        response = await client.get("/api/invoices")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "OWNER_REQUIRED"

    @pytest.mark.asyncio
    async def test_float_amounts_are_rejected(self, client: AsyncClient):
        payload = {"positions": [{"text": "x", "quantity": 1, "tax_rate": 19, "net_price": 0.1}]}

        response = await client.post("/api/invoices", json=payload, headers=OWNER)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_foreign_invoice_looks_missing(self, client: AsyncClient):
        """Other owners get exactly the response of a nonexistent invoice"""
        data = await create_invoice(client)
        invoice_id = data["invoice_id"]

        foreign = await client.get(f"/api/invoices/{invoice_id}", headers=OTHER_OWNER)
        missing = await client.get("/api/invoices/999999", headers=OTHER_OWNER)

        assert foreign.status_code == missing.status_code == 404
        assert foreign.json()["error"]["code"] == missing.json()["error"]["code"] == "INVOICE_NOT_FOUND"
        assert foreign.json()["error"]["message"] == f"Invoice with ID {invoice_id} not found"

    @pytest.mark.asyncio
    async def test_save_replaces_positions(self, client: AsyncClient):
        data = await create_invoice(client)
        payload = {**PAYLOAD, "positions": [{"text": "Support", "quantity": "3", "tax_rate": "19", "net_price": "10"}]}

        response = await client.put(f"/api/invoices/{data['invoice_id']}", json=payload, headers=OWNER)

        assert response.status_code == 200
        body = response.json()
        assert [p["text"] for p in body["positions"]] == ["Support"]
        assert Decimal(body["gross_total"]) == Decimal("35.7")
        assert body["number"] == data["number"]

    @pytest.mark.asyncio
    async def test_lifecycle(self, client: AsyncClient):
        data = await create_invoice(client)
        invoice_id = data["invoice_id"]

        issued = await set_status(client, invoice_id, "issued")
        assert issued.status_code == 200
        assert issued.json()["issued_at"] is not None
        assert Decimal(issued.json()["gross_total"]) == Decimal("226")

        edit = await client.put(f"/api/invoices/{invoice_id}", json=PAYLOAD, headers=OWNER)
        assert edit.status_code == 400
        assert edit.json()["error"]["code"] == "INVOICE_NOT_EDITABLE"

        paid = await set_status(client, invoice_id, "paid")
        assert paid.status_code == 200

        voided = await set_status(client, invoice_id, "voided")
        assert voided.status_code == 409
        assert voided.json()["error"]["code"] == "FORBIDDEN_STATUS_TRANSITION"

        invoice = await client.get(f"/api/invoices/{invoice_id}", headers=OWNER)
        assert invoice.json()["status"] == "paid"

    @pytest.mark.asyncio
    async def test_rollback_to_draft(self, client: AsyncClient):
        data = await create_invoice(client)
        invoice_id = data["invoice_id"]
        await set_status(client, invoice_id, "issued")

        response = await set_status(client, invoice_id, "draft")

        assert response.status_code == 200
        assert response.json()["status"] == "draft"
        assert response.json()["issued_at"] is None

    @pytest.mark.asyncio
    async def test_invalid_transition(self, client: AsyncClient):
        data = await create_invoice(client)

        response = await set_status(client, data["invoice_id"], "paid")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"

    @pytest.mark.asyncio
    async def test_list_and_delete(self, client: AsyncClient):
        first = await create_invoice(client)
        await create_invoice(client)
        await create_invoice(client, headers=OTHER_OWNER)

        listing = await client.get("/api/invoices", params={"limit": 1}, headers=OWNER)
        assert listing.status_code == 200
        assert len(listing.json()["items"]) == 1
        assert listing.json()["next_cursor"] == "1"
        assert listing.json()["total"] == 2

        deleted = await client.delete(f"/api/invoices/{first['invoice_id']}", headers=OWNER)
        assert deleted.status_code == 204

        listing = await client.get("/api/invoices", headers=OWNER)
        assert len(listing.json()["items"]) == 1

    @pytest.mark.asyncio
    async def test_list_filters_by_several_statuses_and_dates(self, client: AsyncClient):
        draft = await create_invoice(client)
        issued = await create_invoice(client)
        paid = await create_invoice(client)
        await set_status(client, issued["invoice_id"], "issued")
        await set_status(client, paid["invoice_id"], "issued")
        await set_status(client, paid["invoice_id"], "paid")

        listing = await client.get(
            "/api/invoices",
            params=[("status", "issued"), ("status", "paid"), ("sort", "created_desc")],
            headers=OWNER,
        )
        assert listing.status_code == 200
        assert listing.json()["total"] == 2
        assert [i["invoice_id"] for i in listing.json()["items"]] == [paid["invoice_id"], issued["invoice_id"]]
        assert draft["invoice_id"] not in [i["invoice_id"] for i in listing.json()["items"]]

        in_range = await client.get(
            "/api/invoices", params={"date_from": "2024-02-01", "date_to": "2024-02-01"}, headers=OWNER
        )
        later = await client.get("/api/invoices", params={"date_from": "2024-03-01"}, headers=OWNER)
        assert in_range.json()["total"] == 3
        assert later.json()["total"] == 0
        assert later.json()["items"] == []

    @pytest.mark.asyncio
    async def test_issued_invoice_cannot_be_deleted(self, client: AsyncClient):
        data = await create_invoice(client)
        await set_status(client, data["invoice_id"], "issued")

        response = await client.delete(f"/api/invoices/{data['invoice_id']}", headers=OWNER)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVOICE_NOT_DELETABLE"

    @pytest.mark.asyncio
    async def test_duplicate(self, client: AsyncClient):
        data = await create_invoice(client)

        response = await client.post(f"/api/invoices/{data['invoice_id']}/duplicate", headers=OWNER)

        assert response.status_code == 201
        assert response.json()["counter"] == 2
        assert response.json()["invoice_date"] == date.today().isoformat()

    @pytest.mark.asyncio
    async def test_verify(self, client: AsyncClient):
        data = await create_invoice(client)

        response = await client.post(
            f"/api/invoices/{data['invoice_id']}/verify",
            json={"name": "Client SARL", "country_code": "FR"},
            headers=OWNER,
        )

        assert response.status_code == 200
        assert response.json()["invoice_id"] == data["invoice_id"]
        assert isinstance(response.json()["problems"], list)

    @pytest.mark.asyncio
    async def test_einvoice_export(self, client: AsyncClient):
        data = await create_invoice(client)

        response = await client.post(
            f"/api/invoices/{data['invoice_id']}/einvoice",
            json={"name": "Client SARL", "country_code": "FR"},
            headers=OWNER,
        )

        assert response.status_code == 200
        document = response.json()["document"]
        assert document["invoice_number"] == data["number"]
        assert document["note"] == "Thank you"
        assert [line["tax_rate_applicable_percent"] for line in document["lines"]] == ["19", "7"]

    @pytest.mark.asyncio
    async def test_download_proforma_pdf(self, client: AsyncClient):
        data = await create_invoice(client)

        response = await client.get(f"/api/invoices/{data['invoice_id']}/proforma/pdf", headers=OWNER)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_proforma_pdf_requires_draft(self, client: AsyncClient):
        data = await create_invoice(client)
        await set_status(client, data["invoice_id"], "issued")

        response = await client.get(f"/api/invoices/{data['invoice_id']}/proforma/pdf", headers=OWNER)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INVOICE_STATUS"
