"""
Tests for job CRUD and the stored job caldo calculation.

Parameter resolution for GET /api/jobs/{id}/mix:
1. Query parameters win
2. Then the calculator settings saved on the job
3. Then applied surface / application dose text
4. Then 0 hectares / default caldo rate
"""
import pytest
from app.routers.jobs import ascii_filename, attachment_headers


def add_product(api, job_id, name, dose, unit, order=0):
    response = api.post(f"/api/jobs/{job_id}/agrochemicals", json={
        "product_name": name, "dose": dose, "unit": unit, "application_order": order,
    })
    assert response.status_code == 201, response.text
    return response.json()


class TestJobCrud:

    def test_create_and_get(self, api, job_factory):
        job = job_factory(superficie_teorica_has=80, cultivo="Soja")
        assert job["status"] == "pending"
        assert job["calc_hectares"] is None

        fetched = api.get(f"/api/jobs/{job['id']}").json()
        assert fetched["title"] == "Fumigación soja"
        assert fetched["superficie_teorica_has"] == 80

    def test_farm_must_belong_to_client(self, api, job_factory):
        job = job_factory()
        other_client = api.post("/api/clients", json={"name": "Otro cliente"}).json()
        response = api.post("/api/jobs", json={
            "client_id": other_client["id"], "farm_id": job["farm_id"], "title": "Mal armado",
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "El campo no pertenece al cliente"

    def test_update_status_and_filter(self, api, job_factory):
        job = job_factory()
        job_factory(title="Otro trabajo")
        response = api.put(f"/api/jobs/{job['id']}", json={"status": "done"})
        assert response.json()["status"] == "done"

        done = api.get("/api/jobs", params={"status": "done"}).json()
        assert [j["id"] for j in done] == [job["id"]]

    def test_delete(self, api, job_factory):
        job = job_factory()
        assert api.delete(f"/api/jobs/{job['id']}").status_code == 204
        assert api.get(f"/api/jobs/{job['id']}").status_code == 404

    def test_other_organization_cannot_see_job(self, job_factory, other_api):
        job = job_factory()
        response = other_api.get(f"/api/jobs/{job['id']}")
        assert response.status_code == 404
        assert response.json()["detail"] == "Trabajo no encontrado"
        assert other_api.get("/api/jobs").json() == []

    def test_missing_user_header(self, api):
        response = api.get("/api/jobs", headers={"X-User-Id": ""})
        assert response.status_code == 401


class TestJobAgrochemicals:

    def test_lines_listed_in_application_order(self, api, job_factory):
        job = job_factory()
        add_product(api, job["id"], "Segundo", 1, "L/ha", order=2)
        add_product(api, job["id"], "Primero", 1, "L/ha", order=1)
        names = [line["product_name"] for line in api.get(f"/api/jobs/{job['id']}/agrochemicals").json()]
        assert names == ["Primero", "Segundo"]

    def test_update_and_delete_line(self, api, job_factory):
        job = job_factory()
        line = add_product(api, job["id"], "Glifosato", 2, "L/ha")

        updated = api.put(f"/api/jobs/{job['id']}/agrochemicals/{line['id']}", json={"dose": 3})
        assert updated.json()["dose"] == 3

        assert api.delete(f"/api/jobs/{job['id']}/agrochemicals/{line['id']}").status_code == 204
        assert api.get(f"/api/jobs/{job['id']}/agrochemicals").json() == []

    def test_unknown_catalog_reference(self, api, job_factory):
        job = job_factory()
        response = api.post(f"/api/jobs/{job['id']}/agrochemicals", json={
            "agrochemical_id": "no-existe", "product_name": "X", "dose": 1, "unit": "L/ha",
        })
        assert response.status_code == 400


class TestJobMix:

    def test_defaults_from_job(self, api, job_factory):
        job = job_factory(superficie_teorica_has=80, superficie_aplicada_has=40, application_dose="12")
        add_product(api, job["id"], "Glifosato", 2, "L/ha", order=0)
        add_product(api, job["id"], "Urea", 20, "kg", order=1)

        data = api.get(f"/api/jobs/{job['id']}/mix").json()
        assert data["job_id"] == job["id"]
        assert data["hectares"] == 40
        assert data["dose_caldo"] == 12
        assert data["total_job_hectares"] == 80
        assert data["caldo_total"] == pytest.approx(480)
        assert data["agua_litros"] == pytest.approx(400)
        amounts = [p["calculated_amount"] for p in data["products"]]
        assert amounts == [pytest.approx(80), pytest.approx(10)]

    def test_without_surfaces_or_dose(self, api, job_factory):
        job = job_factory()
        data = api.get(f"/api/jobs/{job['id']}/mix").json()
        assert data["hectares"] == 0
        assert data["dose_caldo"] == 10
        assert data["caldo_total"] == 0

    def test_saved_settings_take_priority(self, api, job_factory):
        job = job_factory(superficie_aplicada_has=40, application_dose="12")
        response = api.put(f"/api/jobs/{job['id']}/mix-settings", json={"calc_hectares": 15, "dose_caldo_l_ha": 8})
        assert response.status_code == 200
        assert response.json()["calc_hectares"] == 15

        data = api.get(f"/api/jobs/{job['id']}/mix").json()
        assert data["hectares"] == 15
        assert data["dose_caldo"] == 8
        assert data["caldo_total"] == pytest.approx(120)

    def test_query_parameters_override(self, api, job_factory):
        job = job_factory(superficie_aplicada_has=40)
        data = api.get(f"/api/jobs/{job['id']}/mix", params={"hectares": 5, "dose_caldo": 20}).json()
        assert data["caldo_total"] == pytest.approx(100)

    def test_excel_export(self, api, job_factory):
        job = job_factory(superficie_aplicada_has=10)
        add_product(api, job["id"], "Glifosato", 2, "L/ha")
        response = api.get(f"/api/jobs/{job['id']}/mix/excel")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert response.content[:2] == b"PK"

    def test_pdf_export_with_negative_water(self, api, job_factory):
        job = job_factory(superficie_aplicada_has=10, application_dose="5")
        add_product(api, job["id"], "Aceite", 8, "L/ha")
        response = api.get(f"/api/jobs/{job['id']}/mix/pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_mix_of_foreign_job(self, job_factory, other_api):
        job = job_factory()
        assert other_api.get(f"/api/jobs/{job['id']}/mix").status_code == 404

    def test_negative_query_parameters_rejected(self, api, job_factory):
        job = job_factory(superficie_aplicada_has=40)
        assert api.get(f"/api/jobs/{job['id']}/mix", params={"hectares": -1}).status_code == 422
        assert api.get(f"/api/jobs/{job['id']}/mix", params={"dose_caldo": -5}).status_code == 422
        assert api.get(f"/api/jobs/{job['id']}/mix/excel", params={"hectares": -1}).status_code == 422
        assert api.get(f"/api/jobs/{job['id']}/mix/pdf", params={"dose_caldo": -1}).status_code == 422


class TestMixSheetFilenames:
    """Download names for job titles with accents and non-latin-1 characters."""

    def test_ascii_filename(self):
        assert ascii_filename("caldo_Fumigación soja.xlsx") == "caldo_Fumigacion_soja.xlsx"
        assert ascii_filename("caldo_Lote Norte – 2026.pdf") == "caldo_Lote_Norte_2026.pdf"
        assert ascii_filename("€€") == "caldo"

    def test_attachment_headers_keep_utf8_name(self):
        header = attachment_headers("caldo_Lote Norte – 2026.xlsx")["Content-Disposition"]
        assert header.startswith('attachment; filename="caldo_Lote_Norte_2026.xlsx"')
        assert "filename*=UTF-8''caldo_Lote%20Norte%20%E2%80%93%202026.xlsx" in header
        header.encode("latin-1")

    @pytest.mark.parametrize("path,extension", [("mix/excel", "xlsx"), ("mix/pdf", "pdf")])
    def test_export_with_non_latin1_title(self, api, job_factory, path, extension):
        job = job_factory(title="Lote Norte – 2026 €", superficie_aplicada_has=10)
        add_product(api, job["id"], "Glifosato", 2, "L/ha")
        response = api.get(f"/api/jobs/{job['id']}/{path}")
        assert response.status_code == 200
        disposition = response.headers["content-disposition"]
        assert f'filename="caldo_Lote_Norte_2026.{extension}"' in disposition
        assert "%E2%80%93" in disposition and "%E2%82%AC" in disposition

    def test_export_with_accented_title(self, api, job_factory):
        job = job_factory(superficie_aplicada_has=10)
        response = api.get(f"/api/jobs/{job['id']}/mix/excel")
        assert response.status_code == 200
        assert 'filename="caldo_Fumigacion_soja.xlsx"' in response.headers["content-disposition"]


class TestNullUpdates:
    """Explicit null on required columns is a validation error, not a 500."""

    def test_null_dose_on_line(self, api, job_factory):
        job = job_factory()
        line = add_product(api, job["id"], "Glifosato", 2, "L/ha")
        for field in ("dose", "unit", "product_name", "application_order"):
            response = api.put(f"/api/jobs/{job['id']}/agrochemicals/{line['id']}", json={field: None})
            assert response.status_code == 422, field
        assert api.get(f"/api/jobs/{job['id']}/agrochemicals").json()[0]["dose"] == 2

    @pytest.mark.parametrize("field", ["title", "client_id", "farm_id", "status"])
    def test_null_required_job_field(self, api, job_factory, field):
        job = job_factory()
        response = api.put(f"/api/jobs/{job['id']}", json={field: None})
        assert response.status_code == 422

    def test_nullable_job_field_can_be_cleared(self, api, job_factory):
        job = job_factory(notes="Revisar viento", superficie_teorica_has=80)
        response = api.put(f"/api/jobs/{job['id']}", json={"notes": None, "superficie_teorica_has": None})
        assert response.status_code == 200
        assert response.json()["notes"] is None
        assert response.json()["superficie_teorica_has"] is None

    def test_null_client_and_farm_names(self, api, job_factory):
        job = job_factory()
        assert api.put(f"/api/clients/{job['client_id']}", json={"name": None}).status_code == 422
        assert api.put(f"/api/farms/{job['farm_id']}", json={"name": None}).status_code == 422


class TestDeleteIntegrity:

    def test_delete_job_removes_attendance_and_hours(self, api, job_factory):
        drone = api.post("/api/equipment/drones", json={"model": "DJI Agras T40"}).json()
        generator = api.post("/api/equipment/generators", json={"brand": "Honda EU70"}).json()
        job = job_factory()
        api.post("/api/attendance", json={
            "job_id": job["id"], "start_date": "2026-03-01",
            "drone_id": drone["id"], "check_in_time": "08:00", "check_out_time": "10:00",
            "generator_id": generator["id"], "gen_usage_hours": 1.5,
        })
        assert api.get(f"/api/equipment/drones/{drone['id']}").json()["total_hours"] == pytest.approx(2.0)

        assert api.delete(f"/api/jobs/{job['id']}").status_code == 204
        assert api.get("/api/attendance").json() == []
        assert api.get(f"/api/equipment/drones/{drone['id']}").json()["total_hours"] == 0
        assert api.get(f"/api/equipment/generators/{generator['id']}").json()["total_hours"] == 0

    def test_client_with_jobs_cannot_be_deleted(self, api, job_factory):
        job = job_factory()
        response = api.delete(f"/api/clients/{job['client_id']}")
        assert response.status_code == 400
        assert response.json()["detail"] == "El cliente tiene trabajos asociados"

        api.delete(f"/api/jobs/{job['id']}")
        assert api.delete(f"/api/clients/{job['client_id']}").status_code == 204

    def test_farm_with_jobs_cannot_be_deleted(self, api, job_factory):
        job = job_factory()
        response = api.delete(f"/api/farms/{job['farm_id']}")
        assert response.status_code == 400
        assert response.json()["detail"] == "El campo tiene trabajos asociados"

    def test_deleting_catalog_product_unlinks_job_lines(self, api, job_factory):
        product = api.post("/api/catalog/agrochemicals", json={"name": "Glifosato 66%"}).json()
        job = job_factory()
        api.post(f"/api/jobs/{job['id']}/agrochemicals", json={
            "agrochemical_id": product["id"], "product_name": "Glifosato 66%", "dose": 2, "unit": "L/ha",
        })

        assert api.delete(f"/api/catalog/agrochemicals/{product['id']}").status_code == 204
        line = api.get(f"/api/jobs/{job['id']}/agrochemicals").json()[0]
        assert line["agrochemical_id"] is None
        assert line["product_name"] == "Glifosato 66%"
