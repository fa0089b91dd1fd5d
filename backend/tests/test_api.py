"""API tests against an in-memory SQLite database with regex extraction."""

import database
from services import compliance_service
from services.llm import ExtractionError

AS_OF = "2026-06-01"
CRON_HEADERS = {"Authorization": "Bearer test-cron-secret"}


def _create_vendor(client, **fields):
    body = {"name": "Acme Janitorial LLC", "organization_id": "org-1", "property_name": "Oakwood Plaza"}
    body.update(fields)
    response = client.post("/api/vendors", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def _upload(client, entity_path, entity_id, coi_text, as_of=AS_OF):
    return client.post(
        f"/api/{entity_path}/{entity_id}/certificates",
        json={"coi_text": coi_text, "as_of": as_of},
    )


def _create_template(client, **fields):
    body = {
        "organization_id": "org-1",
        "name": "Oakwood Vendor",
        "category": "vendor",
        "risk_level": "standard",
        "coverages": [{"coverage_type": "general_liability", "min_amount": "$1M"}],
    }
    body.update(fields)
    response = client.post("/api/templates", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def test_root(test_client):
    response = test_client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "online"


class TestEvaluate:
    def test_compliant(self, test_client):
        response = test_client.post("/api/compliance/evaluate", json={
            "requirements": [{"coverage_type": "workers_comp", "min_amount": "Statutory"}],
            "certificate": {"coverages": {"workers_comp": {"amount": 1, "expiration_date": "2027-01-01"}}},
            "as_of": AS_OF,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["result"]["overall_status"] == "compliant"
        assert data["result"]["gaps"] == []
        assert data["insight"] == "All required coverages meet requirements."

    def test_expired(self, test_client):
        response = test_client.post("/api/compliance/evaluate", json={
            "requirements": [{"coverage_type": "auto_liability", "min_amount": 1000000}],
            "certificate": {"coverages": {"auto_liability": {"amount": 2000000, "expiration_date": "2026-05-31"}}},
            "as_of": AS_OF,
        })

        data = response.json()
        assert data["result"]["overall_status"] == "expired"
        assert [g["reason"] for g in data["result"]["gaps"]] == ["expired"]
        assert data["insight"].startswith("Expired: Automobile Liability")

    def test_bad_amount_is_422(self, test_client):
        response = test_client.post("/api/compliance/evaluate", json={
            "requirements": [{"coverage_type": "general_liability", "min_amount": "a lot"}],
            "certificate": {},
        })

        assert response.status_code == 422

    def test_missing_expiration_date_is_a_gap(self, test_client):
        response = test_client.post("/api/compliance/evaluate", json={
            "requirements": [{"coverage_type": "general_liability", "min_amount": 1000000}],
            "certificate": {"coverages": {"general_liability": {"amount": 1000000}}},
            "as_of": AS_OF,
        })

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["overall_status"] == "non_compliant"
        assert result["gaps"][0]["reason"] == "missing"
        assert result["gaps"][0]["required_value"] == "Policy expiration date"
        assert "General Liability has no expiration date shown" in response.json()["insight"]

    def test_certificate_holder_checked_when_given(self, test_client):
        response = test_client.post("/api/compliance/evaluate", json={
            "requirements": [{"coverage_type": "general_liability", "min_amount": 1000000}],
            "certificate": {
                "certificate_holder": "Maple Street Realty",
                "coverages": {"general_liability": {"amount": 1000000, "expiration_date": "2027-01-01"}},
            },
            "certificate_holder": "Oakwood Properties LLC",
            "as_of": AS_OF,
        })

        gaps = response.json()["result"]["gaps"]
        assert [(g["coverage"], g["reason"]) for g in gaps] == [("certificate_holder", "holder_mismatch")]

    def test_negative_warn_window_is_422(self, test_client):
        response = test_client.post("/api/compliance/evaluate", json={
            "requirements": [{"coverage_type": "general_liability", "min_amount": 1000000}],
            "certificate": {"coverages": {"general_liability": {"amount": 1000000, "expiration_date": "2027-01-01"}}},
            "warn_window_days": -1,
        })

        assert response.status_code == 422


def test_insight_endpoint(test_client):
    response = test_client.post("/api/compliance/insight", json={
        "overall_status": "non_compliant",
        "as_of": AS_OF,
        "gaps": [{"coverage": "umbrella", "reason": "missing"}],
    })

    assert response.status_code == 200
    assert response.json()["insight"] == "Not compliant: 1 gap found. Umbrella / Excess Liability is missing."


class TestReference:
    def test_coverage_types(self, test_client):
        data = test_client.get("/api/coverage-types").json()

        keys = [c["key"] for c in data["coverage_types"]]
        assert "general_liability" in keys
        assert "Additional Insured" in data["endorsements"]

    def test_risk_levels(self, test_client):
        keys = [r["key"] for r in test_client.get("/api/risk-levels").json()]

        assert keys == ["standard", "high_risk", "professional_services", "restaurant", "industrial", "retail"]

    def test_default_templates(self, test_client):
        templates = test_client.get("/api/default-templates").json()

        standard = next(t for t in templates if t["name"] == "Standard Vendor")
        gl = standard["coverages"][0]
        assert gl["min_amount"] == "$1,000,000"
        assert gl["min_aggregate"] == "$2,000,000"
        wc = next(c for c in standard["coverages"] if c["coverage_type"] == "workers_comp")
        assert wc["min_amount"] == "Statutory"


class TestTemplates:
    def test_lists_seeded_defaults(self, test_client):
        templates = test_client.get("/api/templates").json()

        assert len(templates) == 7
        assert all(t["is_system_default"] for t in templates)

    def test_category_filter(self, test_client):
        templates = test_client.get("/api/templates", params={"category": "tenant"}).json()

        assert {t["risk_level"] for t in templates} == {"standard", "retail", "restaurant"}

    def test_org_template_hides_default(self, test_client):
        custom = _create_template(test_client)

        templates = test_client.get(
            "/api/templates", params={"organization_id": "org-1", "category": "vendor"},
        ).json()

        standard = [t for t in templates if t["risk_level"] == "standard"]
        assert [t["id"] for t in standard] == [custom["id"]]
        assert len(templates) == 4

        other_org = test_client.get("/api/templates", params={"organization_id": "org-2"}).json()
        assert custom["id"] not in [t["id"] for t in other_org]

    def test_create_parses_amounts(self, test_client):
        custom = _create_template(test_client)

        assert custom["coverages"][0]["min_amount"] == 1000000
        assert custom["is_system_default"] is False
        assert test_client.get(f"/api/templates/{custom['id']}").json()["name"] == "Oakwood Vendor"

    def test_create_rejects_duplicate_coverages(self, test_client):
        response = test_client.post("/api/templates", json={
            "organization_id": "org-1",
            "name": "Broken",
            "category": "vendor",
            "coverages": [
                {"coverage_type": "umbrella", "min_amount": 1},
                {"coverage_type": "umbrella", "min_amount": 2},
            ],
        })

        assert response.status_code == 422

    def test_get_unknown_is_404(self, test_client):
        assert test_client.get("/api/templates/9999").status_code == 404

    def test_system_default_cannot_be_edited(self, test_client):
        default = test_client.get("/api/templates").json()[0]

        response = test_client.put(f"/api/templates/{default['id']}", json={
            "organization_id": "org-1", "name": "Mine now", "coverages": [],
        })

        assert response.status_code == 403

    def test_other_org_cannot_edit(self, test_client):
        custom = _create_template(test_client)

        response = test_client.put(f"/api/templates/{custom['id']}", json={
            "organization_id": "org-2", "name": "Hijacked", "coverages": [],
        })

        assert response.status_code == 403

    def test_duplicate_default(self, test_client):
        default = next(t for t in test_client.get("/api/templates").json() if t["name"] == "High Risk Vendor")

        response = test_client.post(f"/api/templates/{default['id']}/duplicate", json={"organization_id": "org-1"})

        assert response.status_code == 200
        copy = response.json()
        assert copy["name"] == "High Risk Vendor (Custom)"
        assert copy["organization_id"] == "org-1"
        assert copy["risk_level"] == "high_risk"
        assert copy["coverages"] == default["coverages"]

    def test_update_reevaluates_assigned_entities(self, test_client, compliant_coi):
        custom = _create_template(test_client)
        vendor = _create_vendor(test_client, template_id=custom["id"])
        idle_vendor = _create_vendor(test_client, name="No Paperwork Inc", template_id=custom["id"])
        assert _upload(test_client, "vendors", vendor["id"], compliant_coi).json()["result"]["overall_status"] == "compliant"

        response = test_client.put(f"/api/templates/{custom['id']}", json={
            "organization_id": "org-1",
            "name": "Oakwood Vendor",
            "coverages": [
                {"coverage_type": "general_liability", "min_amount": 1000000},
                {"coverage_type": "umbrella", "min_amount": 5000000},
            ],
        })

        assert response.status_code == 200, response.text
        data = response.json()
        assert len(data["template"]["coverages"]) == 2
        assert data["recalculation"]["reevaluated"] == 1
        assert data["recalculation"]["pending"] == 1
        assert test_client.get(f"/api/vendors/{vendor['id']}").json()["compliance_status"] == "non_compliant"
        assert test_client.get(f"/api/vendors/{idle_vendor['id']}").json()["compliance_status"] == "pending"

        history = test_client.get(f"/api/vendors/{vendor['id']}/history").json()
        assert [s["overall_status"] for s in history] == ["non_compliant", "compliant"]

    def test_update_counts_reevaluation_failures(self, test_client, compliant_coi, monkeypatch):
        custom = _create_template(test_client)
        vendor = _create_vendor(test_client, template_id=custom["id"])
        _upload(test_client, "vendors", vendor["id"], compliant_coi)

        def broken_check(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(compliance_service, "check_certificate", broken_check)
        response = test_client.put(f"/api/templates/{custom['id']}", json={
            "organization_id": "org-1",
            "name": "Oakwood Vendor v2",
            "coverages": [{"coverage_type": "general_liability", "min_amount": 2000000}],
        })

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["template"]["name"] == "Oakwood Vendor v2"
        assert data["recalculation"]["failed"] == 1
        assert data["recalculation"]["success"] is False

    def test_delete_refused_while_assigned(self, test_client):
        custom = _create_template(test_client)
        _create_vendor(test_client, template_id=custom["id"])

        response = test_client.delete(f"/api/templates/{custom['id']}", params={"organization_id": "org-1"})

        assert response.status_code == 409

    def test_delete_unassigned(self, test_client):
        custom = _create_template(test_client)

        response = test_client.delete(f"/api/templates/{custom['id']}", params={"organization_id": "org-1"})

        assert response.status_code == 200
        assert test_client.get(f"/api/templates/{custom['id']}").status_code == 404

    def test_usage(self, test_client):
        custom = _create_template(test_client)
        _create_vendor(test_client, template_id=custom["id"])
        _create_vendor(test_client, name="Sparkle Windows", template_id=custom["id"])
        _create_vendor(test_client, name="Elsewhere LLC", property_name="Harbor Point", template_id=custom["id"])

        usage = test_client.get(f"/api/templates/{custom['id']}/usage").json()

        assert usage == {"vendors": 3, "tenants": 0, "total_entities": 3, "properties": 2}

        listed = test_client.get("/api/templates", params={"organization_id": "org-1"}).json()
        assert next(t for t in listed if t["id"] == custom["id"])["vendor_count"] == 3


class TestEntities:
    def test_create_and_get_vendor(self, test_client):
        vendor = _create_vendor(test_client, risk_level="High_Risk", service_type="Roofing")

        assert vendor["entity_type"] == "vendor"
        assert vendor["risk_level"] == "high_risk"
        assert vendor["compliance_status"] == "pending"
        assert test_client.get(f"/api/vendors/{vendor['id']}").json()["name"] == "Acme Janitorial LLC"

    def test_unknown_vendor_is_404(self, test_client):
        assert test_client.get("/api/vendors/9999").status_code == 404

    def test_vendor_and_tenant_ids_are_separate(self, test_client):
        vendor = _create_vendor(test_client)

        assert test_client.get(f"/api/tenants/{vendor['id']}").status_code == 404

    def test_template_of_wrong_category_rejected(self, test_client):
        tenant_template = test_client.get("/api/templates", params={"category": "tenant"}).json()[0]

        response = test_client.post("/api/vendors", json={"name": "Acme", "template_id": tenant_template["id"]})

        assert response.status_code == 422

    def test_upload_compliant_certificate(self, test_client, compliant_coi):
        vendor = _create_vendor(test_client)

        response = _upload(test_client, "vendors", vendor["id"], compliant_coi)

        assert response.status_code == 200, response.text
        report = response.json()
        assert report["result"]["overall_status"] == "compliant"
        assert report["template_name"] == "Standard Vendor"
        assert report["coi_data"]["insured_name"] == "Acme Janitorial LLC"
        assert report["certificate_id"] is not None
        assert report["snapshot_id"] is not None
        assert test_client.get(f"/api/vendors/{vendor['id']}").json()["compliance_status"] == "compliant"

    def test_upload_non_compliant_certificate(self, test_client, compliant_coi):
        vendor = _create_vendor(test_client)
        coi = compliant_coi.replace("$1,000,000 per occurrence", "$500,000 per occurrence")

        report = _upload(test_client, "vendors", vendor["id"], coi).json()

        assert report["result"]["overall_status"] == "non_compliant"
        gap = report["result"]["gaps"][0]
        assert gap["coverage"] == "general_liability"
        assert gap["reason"] == "amount_below_minimum"
        assert report["insight"].startswith("Not compliant: 1 gap found.")

    def test_upload_undated_certificate_records_gap(self, test_client):
        vendor = _create_vendor(test_client)
        undated = "General Liability: $1,000,000 per occurrence / $2,000,000 aggregate\n"

        response = _upload(test_client, "vendors", vendor["id"], undated)

        assert response.status_code == 200, response.text
        result = response.json()["result"]
        assert result["overall_status"] == "non_compliant"
        assert {"coverage": "general_liability", "reason": "missing"} in [
            {"coverage": g["coverage"], "reason": g["reason"]} for g in result["gaps"]
        ]
        assert {"auto_liability", "workers_comp"} <= {g["coverage"] for g in result["gaps"]}
        assert len(test_client.get(f"/api/vendors/{vendor['id']}/history").json()) == 1
        assert test_client.get(f"/api/vendors/{vendor['id']}").json()["compliance_status"] == "non_compliant"

    def test_certificate_holder_spelling_variant_matches(self, test_client, compliant_coi):
        vendor = _create_vendor(test_client, certificate_holder_name="Oakwood Properties, L.L.C.")

        report = _upload(test_client, "vendors", vendor["id"], compliant_coi).json()

        assert vendor["certificate_holder_name"] == "Oakwood Properties, L.L.C."
        assert report["result"]["overall_status"] == "compliant"

    def test_wrong_certificate_holder_is_a_gap(self, test_client, compliant_coi):
        vendor = _create_vendor(test_client, certificate_holder_name="Maple Street Realty")

        report = _upload(test_client, "vendors", vendor["id"], compliant_coi).json()

        assert report["result"]["overall_status"] == "non_compliant"
        gap = report["result"]["gaps"][-1]
        assert gap["reason"] == "holder_mismatch"
        assert gap["actual_value"] == "Oakwood Properties"

    def test_restaurant_tenant_uses_restaurant_template(self, test_client, compliant_coi):
        response = test_client.post("/api/tenants", json={
            "name": "Blue Fin Sushi", "organization_id": "org-1", "risk_level": "restaurant", "unit": "101",
        })
        tenant = response.json()

        report = _upload(test_client, "tenants", tenant["id"], compliant_coi).json()

        assert report["template_name"] == "Restaurant Tenant"
        missing = {g["coverage"] for g in report["result"]["gaps"] if g["reason"] == "missing"}
        assert missing == {"umbrella", "property_insurance", "liquor_liability"}

    def test_no_template_for_risk_level_is_404(self, test_client, compliant_coi):
        tenant = test_client.post("/api/tenants", json={"name": "Steel Works", "risk_level": "industrial"}).json()

        response = _upload(test_client, "tenants", tenant["id"], compliant_coi)

        assert response.status_code == 404
        assert "industrial" in response.json()["detail"]

    def test_empty_coi_text_rejected(self, test_client):
        vendor = _create_vendor(test_client)

        assert _upload(test_client, "vendors", vendor["id"], "   ").status_code == 422

    def test_extraction_failure_is_502(self, test_client, compliant_coi, monkeypatch):
        def broken_extraction(text):
            raise ExtractionError("model returned prose")

        monkeypatch.setattr(compliance_service, "extract_certificate_data", broken_extraction)
        vendor = _create_vendor(test_client)

        response = _upload(test_client, "vendors", vendor["id"], compliant_coi)

        assert response.status_code == 502
        assert "model returned prose" in response.json()["detail"]

    def test_recheck_uses_latest_certificate(self, test_client, compliant_coi):
        vendor = _create_vendor(test_client)
        _upload(test_client, "vendors", vendor["id"], compliant_coi.replace("$500,000", "$100,000"))
        _upload(test_client, "vendors", vendor["id"], compliant_coi)

        response = test_client.post(f"/api/vendors/{vendor['id']}/recheck")

        assert response.status_code == 200
        assert response.json()["result"]["overall_status"] == "compliant"
        assert len(test_client.get(f"/api/vendors/{vendor['id']}/history").json()) == 3

    def test_recheck_without_certificate_is_404(self, test_client):
        vendor = _create_vendor(test_client)

        assert test_client.post(f"/api/vendors/{vendor['id']}/recheck").status_code == 404

    def test_history_newest_first(self, test_client, compliant_coi):
        vendor = _create_vendor(test_client)
        _upload(test_client, "vendors", vendor["id"], compliant_coi)
        _upload(test_client, "vendors", vendor["id"], compliant_coi.replace("$1,000,000 per occurrence", "$1"))

        history = test_client.get(f"/api/vendors/{vendor['id']}/history").json()

        assert [s["overall_status"] for s in history] == ["non_compliant", "compliant"]
        assert history[0]["gap_count"] == 1
        assert history[0]["result"]["as_of"] == AS_OF


class TestRecheckAll:
    def test_requires_cron_secret(self, test_client):
        assert test_client.post("/api/compliance/recheck-all").status_code == 401
        assert test_client.post(
            "/api/compliance/recheck-all", headers={"Authorization": "Bearer wrong"},
        ).status_code == 401

    def test_counts_by_status(self, test_client, compliant_coi):
        compliant = _create_vendor(test_client)
        short = _create_vendor(test_client, name="Short Limits LLC")
        _create_vendor(test_client, name="Never Uploaded")
        _upload(test_client, "vendors", compliant["id"], compliant_coi)
        _upload(test_client, "vendors", short["id"], compliant_coi.replace("$500,000", "$100,000"))

        response = test_client.post("/api/compliance/recheck-all", headers=CRON_HEADERS)

        assert response.status_code == 200
        assert response.json() == {
            "checked": 2, "compliant": 1, "non_compliant": 1, "expired": 0, "failed": 0,
        }

    def test_failures_are_counted_not_raised(self, test_client, compliant_coi, monkeypatch):
        vendor = _create_vendor(test_client)
        _upload(test_client, "vendors", vendor["id"], compliant_coi)

        def broken_check(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(compliance_service, "check_certificate", broken_check)
        response = test_client.post("/api/compliance/recheck-all", headers=CRON_HEADERS)

        assert response.status_code == 200
        assert response.json()["failed"] == 1
        assert response.json()["checked"] == 0

    def test_undated_certificate_is_checked_not_failed(self, test_client):
        vendor = _create_vendor(test_client)
        undated = "General Liability: $1,000,000 per occurrence / $2,000,000 aggregate\n"
        assert _upload(test_client, "vendors", vendor["id"], undated).status_code == 200

        response = test_client.post("/api/compliance/recheck-all", headers=CRON_HEADERS)

        assert response.json()["checked"] == 1
        assert response.json()["non_compliant"] == 1
        assert response.json()["failed"] == 0


class TestWithoutDatabase:
    def test_persistence_routes_are_503(self, test_client, monkeypatch):
        monkeypatch.setattr(database, "SessionLocal", None)

        assert test_client.get("/api/templates").status_code == 503
        assert test_client.get("/api/vendors/1").status_code == 503
        assert test_client.post("/api/vendors", json={"name": "Acme"}).status_code == 503

    def test_evaluation_still_works(self, test_client, monkeypatch):
        monkeypatch.setattr(database, "SessionLocal", None)

        response = test_client.post("/api/compliance/evaluate", json={
            "requirements": [{"coverage_type": "general_liability", "min_amount": 1000000}],
            "certificate": {},
        })

        assert response.status_code == 200
        assert response.json()["result"]["overall_status"] == "non_compliant"
