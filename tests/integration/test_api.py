"""HTTP API tests using FastAPI's TestClient (mock engines)"""

import pytest
from fastapi.testclient import TestClient

from server.main import app
from tests.mocks.fixtures import (
    make_blueprint_document,
    make_healthy_video,
    make_plan,
    make_video_document,
)


@pytest.fixture
def client():
    # context manager runs the lifespan, which builds the router
    with TestClient(app) as c:
        yield c


@pytest.mark.integration
class TestServiceEndpoints:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["registry_version"] == "2024.11.1"
        assert data["engines"] == 7

    def test_root(self, client):
        data = client.get("/").json()
        assert data["endpoints"]["route"] == "POST /route"


@pytest.mark.integration
class TestDecisionEndpoints:

    def test_decide(self, client):
        response = client.post("/decide", json={"analysis": make_video_document(), "goal": "ctr"})
        assert response.status_code == 200
        data = response.json()
        assert data["outcome"] == "strategies"
        assert data["strategies"][0]["strategy"]["candidate"]["framework"] == "4Ps"

    def test_decide_goal_from_blueprint(self, client):
        blueprint = {
            "blueprint_id": "bp_1",
            "framework": "PAS",
            "objective": "ctr",
            "variation_ideas": [{
                "id": "idea_1",
                "action": "emphasize_segment",
                "target_segment_type": "hook",
                "intent": "Stronger opening",
            }],
        }
        response = client.post("/decide", json={"analysis": make_video_document(), "blueprint": blueprint})
        data = response.json()
        assert data["strategies"][0]["strategy"]["candidate"]["framework"] == "4Ps"

    def test_decide_no_action(self, client):
        response = client.post("/decide", json={"analysis": make_healthy_video().to_dict()})
        assert response.status_code == 200
        assert response.json()["outcome"] == "NO_ACTION"

    def test_invalid_analysis(self, client):
        document = make_video_document()
        document["segments"][1]["start_ms"] = 1000
        response = client.post("/decide", json={"analysis": document})

        assert response.status_code == 422
        data = response.json()
        assert data["document"] == "analysis"
        assert data["errors"]

    def test_compile(self, client):
        response = client.post("/compile", json={"analysis": make_video_document(), "goal": "ctr"})
        assert response.status_code == 200
        plan = response.json()["plan"]
        assert plan["plan_id"] == "plan_cand_4ps_vid_001"
        assert plan["status"] == "compilable"

    def test_compile_index_out_of_range(self, client):
        response = client.post(
            "/compile", json={"analysis": make_video_document(), "goal": "ctr", "strategy_index": 4}
        )
        assert response.status_code == 400

    def test_compile_decision_failure(self, client):
        response = client.post("/compile", json={"analysis": make_healthy_video().to_dict()})
        assert response.json()["plan"] is None

    def test_compile_variation(self, client):
        response = client.post("/compile", json={
            "analysis": make_video_document(),
            "blueprint": make_blueprint_document(),
            "variation_index": 0,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["decision"] is None
        assert data["plan"]["plan_id"] == "plan_bp_001_idea_1"
        assert data["plan"]["variation_id"] == "idea_1"
        assert data["plan"]["status"] == "compilable"

    def test_compile_variation_out_of_range(self, client):
        response = client.post("/compile", json={
            "analysis": make_video_document(),
            "blueprint": make_blueprint_document(),
            "variation_index": 9,
        })
        assert response.status_code == 400
        assert "bp_001" in response.json()["detail"]

    def test_compile_variation_needs_blueprint(self, client):
        response = client.post(
            "/compile", json={"analysis": make_video_document(), "variation_index": 0}
        )
        assert response.status_code == 400


@pytest.mark.integration
class TestRoutingEndpoints:

    def test_route(self, client):
        response = client.post("/route", json={"plan": make_plan().to_dict()})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["engine_id"] == "ffmpeg-local"

    def test_route_all_excluded(self, client):
        engines = [e["engine_id"] for e in client.get("/engines").json()["engines"]]
        response = client.post("/route", json={
            "plan": make_plan().to_dict(),
            "constraints": {"excluded_engines": engines},
        })
        data = response.json()
        assert data["status"] == "partial_success"
        assert data["artifacts"]["render_plan"]["plan_id"] == "plan_test"
        assert data["artifacts"]["ffmpeg_command"]

    def test_route_bad_plan(self, client):
        response = client.post("/route", json={"plan": {"plan_id": "x"}})
        assert response.status_code == 422
        assert response.json()["document"] == "render plan"

    def test_route_null_timeline(self, client):
        plan = make_plan().to_dict()
        plan["timeline"] = None
        response = client.post("/route", json={"plan": plan})

        assert response.status_code == 422
        assert [e["path"] for e in response.json()["errors"]] == ["timeline"]

    def test_route_revalidates_stored_status(self, client):
        plan = make_plan().to_dict()
        plan["timeline"][0]["trim_start_ms"] = 7000
        response = client.post("/route", json={"plan": plan})

        data = response.json()
        assert data["status"] == "partial_success"
        assert data["reason"] == "Plan is uncompilable: Timeline has overlapping segments"

    def test_route_batch(self, client):
        engines = [e["engine_id"] for e in client.get("/engines").json()["engines"]]
        response = client.post("/route/batch", json={"jobs": [
            {"plan": make_plan("plan_a").to_dict()},
            {"plan": make_plan("plan_b").to_dict(), "constraints": {"excluded_engines": engines}},
        ]})
        assert response.status_code == 200

        data = response.json()
        assert data["concurrency"] == 4
        assert data["completed"] == 1
        assert [r["status"] for r in data["results"]] == ["completed", "partial_success"]

    def test_route_batch_concurrency_override(self, client):
        response = client.post("/route/batch", json={
            "jobs": [{"plan": make_plan().to_dict()}],
            "concurrency": 2,
        })
        assert response.json()["concurrency"] == 2

    def test_route_batch_needs_jobs(self, client):
        assert client.post("/route/batch", json={"jobs": []}).status_code == 422

    def test_pipeline(self, client):
        response = client.post("/pipeline", json={"analysis": make_video_document(), "goal": "ctr"})
        data = response.json()
        assert data["decision"]["outcome"] == "strategies"
        assert data["route"]["output_ref"] == "mock://renders/ffmpeg-local/plan_cand_4ps_vid_001.mp4"

    def test_list_engines(self, client):
        data = client.get("/engines").json()
        assert data["version"] == "2024.11.1"
        assert len(data["engines"]) == 7

    def test_get_engine(self, client):
        response = client.get("/engines/remotion")
        assert response.status_code == 200
        assert response.json()["cost_tier"] == "low"

    def test_unknown_engine(self, client):
        assert client.get("/engines/nope").status_code == 404
