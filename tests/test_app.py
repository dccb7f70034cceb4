import pytest

pytest.importorskip("flask")

import app as app_module
from app import parse_solve_payload


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(app_module, "BASE_DIR", str(tmp_path))
    app_module.app.config["TESTING"] = True
    return app_module.app.test_client()


def test_parse_solve_payload_accepts_text_and_rows():
    proj, timeout = parse_solve_payload({"grid": "C..\r\n...\n\n", "timeout": "2.5"})
    assert (proj.width, proj.height) == (3, 2)
    assert timeout == 2.5

    proj, timeout = parse_solve_payload({"grid": ["C.", ".#"]})
    assert proj.buds()[0].x == 1
    assert timeout is None

    proj, _ = parse_solve_payload({"grid": "C..\n   \n..C\n"})
    assert proj.height == 3
    assert proj.crystals()[-1].y == 2


@pytest.mark.parametrize("payload", [
    {},
    {"grid": ""},
    {"grid": "C.", "timeout": "soon"},
    {"grid": "C.", "timeout": -1},
    {"grid": "C?"},
])
def test_parse_solve_payload_rejects_bad_input(payload):
    with pytest.raises(ValueError):
        parse_solve_payload(payload)


def test_solve_returns_groups_and_writes_outputs(client, tmp_path):
    resp = client.post("/solve", json={"grid": "C...C\n##.##", "timeout": 5})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["ok"] is True
    assert body["group_count"] == 1
    assert body["covered"] == 2
    assert body["crystal_pct"] == 100.0
    assert body["invalid"] == []
    assert body["timed_out"] is False
    assert body["svg"].startswith("<svg")
    assert (tmp_path / "solution.txt").exists()
    assert (tmp_path / "layout_view.html").exists()

    snap = client.get("/progress").get_json()
    assert snap["status"] == "Solved"
    assert snap["coverage_pct"] == 100.0


def test_solve_rejects_bad_grid(client):
    resp = client.post("/solve", data={"grid": "C?C"})
    assert resp.status_code == 400
    assert resp.get_json()["ok"] is False

    snap = client.get("/progress")
    assert snap.headers["Cache-Control"].startswith("no-store")
    assert snap.get_json()["status"] == "Error"


def test_index_serves_form(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"<textarea" in resp.data


def test_solver_failure_returns_500_and_finishes_progress(client, monkeypatch):
    class ExplodingSolver:
        def __init__(self, **kwargs):
            self.last_result = None

        def solve(self, proj):
            raise RuntimeError("out of shapes")

    monkeypatch.setattr(app_module, "IslandSolver", ExplodingSolver)

    resp = client.post("/solve", json={"grid": "C...C\n##.##"})

    assert resp.status_code == 500
    body = resp.get_json()
    assert body["ok"] is False
    assert "RuntimeError: out of shapes" in body["error"]

    snap = client.get("/progress").get_json()
    assert snap["status"] == "Error"
    assert snap["done"] is True
    assert snap["ok"] is False
