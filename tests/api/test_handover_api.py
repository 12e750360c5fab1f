"""Tests for the handover endpoints."""

from parcelhub.db.models import HandoverStatus, Platform


def upload(*tracking_numbers, **handover_data):
    handover_data.setdefault("date", "2025-03-01")
    handover_data.setdefault("fileName", "manifest.xlsx")
    return {
        "handoverData": handover_data,
        "extractedData": [
            {"trackingNo": tn, "portCode": "MNL", "packageType": "Pouch"}
            for tn in tracking_numbers
        ],
    }


class TestCreateHandover:
    async def test_create_reports_counts(self, client, add_parcel):
        await add_parcel("EXISTING")

        response = await client.post(
            "/api/lazada/handovers", json=upload("A", "A", "EXISTING", "B", " ")
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["addedCount"] == 2
        assert body["duplicatesSkipped"] == 2
        assert body["internalDuplicates"] == 1
        assert body["databaseDuplicates"] == 1
        assert body["blankSkipped"] == 1
        assert body["handover"]["quantity"] == 2
        assert body["handover"]["type"] == "lazada"
        assert [p["tracking_number"] for p in body["handover"]["parcels"]] == ["A", "B"]
        assert body["message"].startswith("Lazada handover created successfully.")

    async def test_platform_path_wins_over_payload(self, client):
        response = await client.post(
            "/api/shopee/handovers", json=upload("spx1", type="lazada")
        )

        handover = response.json()["handover"]
        assert handover["type"] == "shopee"
        assert handover["parcels"][0]["tracking_number"] == "SPX1"

    async def test_generic_create_takes_type_from_payload(self, client):
        response = await client.post("/api/handovers", json=upload(type="shopee"))

        assert response.json()["handover"]["type"] == "shopee"

    async def test_generic_create_defaults_to_lazada(self, client):
        response = await client.post("/api/handovers", json=upload())

        assert response.json()["handover"]["type"] == "lazada"

    async def test_plain_tracking_numbers(self, client):
        payload = upload()
        payload["trackingNumbers"] = ["spx1", "spx2"]

        response = await client.post("/api/shopee/handovers", json=payload)

        assert response.json()["addedCount"] == 2

    async def test_missing_date(self, client):
        response = await client.post(
            "/api/lazada/handovers", json={"handoverData": {}, "extractedData": []}
        )

        assert response.status_code == 400
        assert response.json()["success"] is False

    async def test_unknown_platform(self, client):
        response = await client.post("/api/tiktok/handovers", json=upload())

        assert response.status_code == 400


class TestListHandovers:
    async def test_platform_list_with_parcel_counts(self, client, add_handover):
        await add_handover(platform=Platform.LAZADA, tracking_numbers=["A", "B"])
        await add_handover(platform=Platform.SHOPEE)

        response = await client.get("/api/lazada/handovers")

        handovers = response.json()["handovers"]
        assert len(handovers) == 1
        assert handovers[0]["parcelCount"] == 2
        assert handovers[0]["quantity"] == 2

    async def test_generic_list(self, client, add_handover):
        await add_handover(platform=Platform.LAZADA)
        await add_handover(platform=Platform.SHOPEE)

        response = await client.get("/api/handovers")

        assert len(response.json()["handovers"]) == 2


class TestHandoverDetail:
    async def test_detail_pages_parcels(self, client, add_handover):
        handover = await add_handover(tracking_numbers=[f"TN{i:02d}" for i in range(12)])

        response = await client.get(f"/api/handovers/{handover.id}", params={"page": 2})

        body = response.json()
        assert body["handover"]["id"] == handover.id
        assert body["handover"]["totalParcels"] == 12
        assert len(body["parcels"]) == 2
        assert body["availableStatuses"] == ["pending"]
        assert body["pagination"] == {
            "currentPage": 2,
            "totalPages": 2,
            "totalCount": 12,
            "hasNext": False,
            "hasPrev": True,
            "limit": 10,
        }

    async def test_detail_of_missing_handover(self, client):
        response = await client.get("/api/handovers/404")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Handover not found"}

    async def test_non_numeric_id(self, client):
        response = await client.get("/api/handovers/abc")

        assert response.status_code == 400

    async def test_id_beyond_integer_range(self, client):
        response = await client.get(f"/api/handovers/{10**20}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Handover not found"}

    async def test_detail_page_beyond_integer_range(self, client, add_handover):
        handover = await add_handover(tracking_numbers=["TN1"])

        response = await client.get(
            f"/api/handovers/{handover.id}", params={"page": 10**18}
        )

        assert response.status_code == 200
        assert response.json()["parcels"] == []


class TestAddTracking:
    async def test_append(self, client, add_handover):
        handover = await add_handover(platform=Platform.SHOPEE, tracking_numbers=["SPX1"])

        response = await client.post(
            f"/api/shopee/handovers/{handover.id}/add-tracking",
            json={"trackingNumbers": ["spx1", "spx2", "spx3"]},
        )

        body = response.json()
        assert body["addedCount"] == 2
        assert body["databaseDuplicates"] == 1
        assert body["quantity"] == 3

    async def test_append_to_other_platform(self, client, add_handover):
        handover = await add_handover(platform=Platform.LAZADA)

        response = await client.post(
            f"/api/shopee/handovers/{handover.id}/add-tracking",
            json={"trackingNumbers": ["A"]},
        )

        assert response.status_code == 404

    async def test_append_nothing(self, client, add_handover):
        handover = await add_handover()

        response = await client.post(
            f"/api/lazada/handovers/{handover.id}/add-tracking",
            json={"trackingNumbers": []},
        )

        assert response.status_code == 400


class TestStatusAndDelete:
    async def test_patch_status(self, client, add_handover):
        handover = await add_handover()

        response = await client.patch(
            f"/api/handovers/{handover.id}", json={"status": "done"}
        )

        assert response.status_code == 200
        assert response.json()["handover"]["status"] == HandoverStatus.DONE.value

    async def test_invalid_status(self, client, add_handover):
        handover = await add_handover()

        response = await client.patch(
            f"/api/handovers/{handover.id}", json={"status": "lost"}
        )

        assert response.status_code == 400

    async def test_put_status_by_body(self, client, add_handover):
        handover = await add_handover()

        response = await client.put(
            "/api/handovers", json={"id": handover.id, "status": "done"}
        )

        assert response.json()["handover"]["status"] == "done"

    async def test_put_status_requires_id(self, client):
        response = await client.put("/api/handovers", json={"status": "done"})

        assert response.status_code == 400
        assert response.json()["error"] == "Handover ID and status are required"

    async def test_delete_cascade(self, client, add_handover):
        handover = await add_handover(platform=Platform.SHOPEE, tracking_numbers=["A", "B"])

        response = await client.delete(f"/api/shopee/handovers/{handover.id}")

        assert response.json()["deletedParcelCount"] == 2
        missing = await client.get(f"/api/handovers/{handover.id}")
        assert missing.status_code == 404

    async def test_delete_wrong_platform(self, client, add_handover):
        handover = await add_handover(platform=Platform.SHOPEE)

        response = await client.delete(f"/api/lazada/handovers/{handover.id}")

        assert response.status_code == 404
