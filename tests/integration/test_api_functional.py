from fastapi.testclient import TestClient


def test_api_audits_run_trace_metrics() -> None:
    from perf_audit.api.main import app

    client = TestClient(app)

    health_resp = client.get("/health")
    assert health_resp.status_code == 200
    assert health_resp.json()["audit_count"] == 1

    audits_resp = client.get("/audits", params={"locale": "es"})
    assert audits_resp.status_code == 200
    assert audits_resp.json()["items"][0]["id"] == "largest-contentful-paint-node"
    assert audits_resp.json()["items"][0]["scoreDisplayMode"] == "informative"

    run_resp = client.post(
        "/audits/run",
        json={
            "artifacts": {
                "ElementRecords": [
                    {"metricTag": "other"},
                    {
                        "metricTag": "largest-contentful-paint",
                        "nodePath": "p2",
                        "selector": "s2",
                        "nodeLabel": "n2",
                        "snippet": "sn2",
                    },
                ]
            }
        },
    )
    assert run_resp.status_code == 200
    entry = run_resp.json()["audits"]["largest-contentful-paint-node"]
    assert entry["score"] == 1
    assert entry["displayValue"] == "1 element found"
    assert entry["details"]["items"] == [
        {
            "node": {
                "type": "node",
                "path": "p2",
                "selector": "s2",
                "nodeLabel": "n2",
                "snippet": "sn2",
            }
        }
    ]

    single_resp = client.post(
        "/audits/largest-contentful-paint-node",
        json={"artifacts": {}, "locale": "es"},
    )
    assert single_resp.status_code == 200
    assert single_resp.json()["scoreDisplayMode"] == "error"
    assert single_resp.json()["title"] == "Elemento de Largest Contentful Paint"

    missing_resp = client.post("/audits/run", json={"artifacts": {}, "auditIds": ["nope"]})
    assert missing_resp.status_code == 404
    assert client.post("/audits/nope", json={"artifacts": {}}).status_code == 404

    traces_resp = client.get("/traces")
    assert traces_resp.status_code == 200
    items = traces_resp.json()["items"]
    assert items

    trace_resp = client.get(f"/traces/{items[-1]['trace_id']}")
    assert trace_resp.status_code == 200
    assert trace_resp.json()["status"] == "error"
    assert client.get("/traces/unknown").status_code == 404

    metrics_resp = client.get("/metrics")
    assert metrics_resp.status_code == 200
    assert metrics_resp.json()["total_runs"] >= 2
    assert metrics_resp.json()["error_runs"] >= 1


def test_api_rejects_malformed_locale_and_limit() -> None:
    from perf_audit.api.main import app

    client = TestClient(app)

    assert client.get("/audits", params={"locale": "../../tmp/evil/x"}).status_code == 422
    assert (
        client.post(
            "/audits/run",
            json={"artifacts": {"ElementRecords": []}, "locale": "es/../../x"},
        ).status_code
        == 422
    )
    assert (
        client.post(
            "/audits/largest-contentful-paint-node",
            json={"artifacts": {}, "locale": "../x"},
        ).status_code
        == 422
    )
    assert client.get("/traces", params={"limit": -5}).status_code == 422
    assert client.get("/traces", params={"limit": 1001}).status_code == 422
    assert client.get("/traces", params={"limit": 1}).status_code == 200
