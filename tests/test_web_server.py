from __future__ import annotations

import uuid
from typing import Any

import pytest
from fastapi.testclient import TestClient

from web_server import app

TABLE: dict[str, Any] = {
    "refId": "A",
    "fields": [
        {"name": "x", "type": "number", "values": [1.0, 2.0, 3.0]},
        {"name": "y", "type": "number", "values": [4.0, 5.0, 6.0]},
        {"name": "z", "type": "number", "values": [7.0, 8.0, 9.0]},
        {"name": "clusterLabel", "type": "string", "values": ["a", "b", "a"]},
    ],
}


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def instance_id(client: TestClient) -> str:
    panel_id = f"panel-{uuid.uuid4().hex[:8]}"
    response = client.post("/render", json={"tables": [TABLE], "instanceId": panel_id})
    assert response.status_code == 200
    return panel_id


def _hover(client: TestClient, panel_id: str, source: str, point: int = 0) -> dict[str, Any]:
    response = client.post(
        f"/panels/{panel_id}/hover",
        json={
            "sourceInstanceId": source,
            "event": {
                "curveNumber": 0,
                "pointNumber": point,
                "seriesName": "a",
                "x": 1.0,
                "y": 4.0,
                "z": 7.0,
                "bbox": {"x0": 5, "x1": 9, "y0": 15, "y1": 19},
            },
        },
    )
    assert response.status_code == 200
    return response.json()


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["panels"] >= 0


def test_render_returns_chart_and_figure(client: TestClient) -> None:
    response = client.post("/render", json={"tables": [TABLE], "includeFigure": True})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [cluster["label"] for cluster in body["chart"]["clusters"]] == ["a", "b"]
    assert [trace["name"] for trace in body["figure"]["data"]] == ["a", "b"]


def test_render_unmappable_input(client: TestClient) -> None:
    table = {"fields": [{"name": "x", "type": "number", "values": [1.0]}]}

    body = client.post("/render", json={"tables": [table]}).json()

    assert body["success"] is False
    assert body["chart"]["clusters"] == []
    assert body["error"]


def test_render_rejects_invalid_options(client: TestClient) -> None:
    response = client.post("/render", json={"tables": [TABLE], "options": {"pointSize": 0}})

    assert response.status_code == 422


def test_hover_flow(client: TestClient, instance_id: str) -> None:
    ignored = _hover(client, instance_id, instance_id)
    assert ignored["update"] is None

    _ = client.post(f"/panels/{instance_id}/pointer", json={"inside": True})
    shown = _hover(client, instance_id, instance_id)
    assert shown["update"]["action"] == "show"
    assert shown["update"]["payload"]["label"] == "a"
    assert shown["update"]["left"] == 5

    repeated = _hover(client, instance_id, instance_id)
    assert repeated["update"] is None

    other = _hover(client, instance_id, "someone-else", point=1)
    assert other["update"] is None

    response = client.post(
        f"/panels/{instance_id}/unhover", json={"sourceInstanceId": instance_id}
    )
    assert response.json()["update"]["action"] == "hide"


def test_camera_flow(client: TestClient, instance_id: str) -> None:
    first = {"eye": {"x": 1.0, "y": 1.0, "z": 1.0}}
    moved = {"eye": {"x": 3.0, "y": 0.0, "z": 1.0}}

    _ = client.post(f"/panels/{instance_id}/camera", json={"camera": first})
    state = client.post(f"/panels/{instance_id}/camera", json={"camera": moved}).json()["state"]
    assert state["camera"] == moved

    state = client.post(f"/panels/{instance_id}/camera/reset").json()["state"]
    assert state["camera"] == first

    body = client.post(
        "/render",
        json={"tables": [TABLE], "instanceId": instance_id, "includeFigure": True},
    ).json()
    assert body["figure"]["layout"]["scene"]["camera"] == first


def test_unknown_panel_is_404(client: TestClient) -> None:
    response = client.post("/panels/nope/pointer", json={"inside": True})

    assert response.status_code == 404


def test_remove_panel(client: TestClient, instance_id: str) -> None:
    assert client.delete(f"/panels/{instance_id}").status_code == 204
    assert client.post(f"/panels/{instance_id}/camera/reset").status_code == 404


def test_legend_toggle_round_trip(client: TestClient) -> None:
    response = client.post(
        "/legend/toggle",
        json={"label": "a", "mode": "toggle-selection", "labels": ["a", "b"]},
    )
    assert response.status_code == 200
    field_config = response.json()["field_config"]
    options = field_config["overrides"][0]["matcher"]["options"]
    assert options["mode"] == "exclude"
    assert options["names"] == ["a"]

    body = client.post(
        "/render", json={"tables": [TABLE], "fieldConfig": field_config}
    ).json()
    visible = {series["label"]: series["visible"] for series in body["chart"]["series"]}
    assert visible == {"a": True, "b": False}


def test_legend_toggle_rejects_empty_label(client: TestClient) -> None:
    response = client.post("/legend/toggle", json={"label": "", "labels": ["a"]})

    assert response.status_code == 400
