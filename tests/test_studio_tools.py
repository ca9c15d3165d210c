"""Studio MCP tools: tool set, JSON payloads, error mapping and metrics."""

import json

import pytest

from ad_entity.adapters.memory_placement_store import InMemoryPlacementStore
from ad_entity.config.runtime import BUILTIN_RULE_PLUGINS
from ad_entity.domain.placement import Placement
from ad_entity.interface.mcp.observability import METRICS, metrics_snapshot, reset_metrics
from ad_entity.interface.mcp.server import create_server
from ad_entity.interface.mcp.tools import STUDIO_TOOLS, StudioTools, _invoke
from ad_entity.plugins.registry import RuleTypeRegistry
from ad_entity.services.context_widget import ContextWidget
from ad_entity.services.placement_service import PlacementService


class FixedUuidProvider:
    def new_uuid(self, placement_id: str) -> str:
        return f"uuid-{placement_id}"


@pytest.fixture(autouse=True)
def _clean_metrics():
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def tools() -> StudioTools:
    store = InMemoryPlacementStore([
        Placement(id="p1", label="Header", uuid="u1"),
        Placement(id="p2", label="Sidebar", uuid="u2"),
    ])
    registry = RuleTypeRegistry()
    registry.load_plugins(BUILTIN_RULE_PLUGINS)
    return StudioTools(
        placements=PlacementService(store, uuid_provider=FixedUuidProvider()),
        widget=ContextWidget(registry=registry, placement_store=store),
    )


def _get_tool_names(server) -> set[str]:
    """Extract registered tool names from a FastMCP server."""
    return set(server._tool_manager._tools.keys())


def test_studio_exposes_exact_tool_set(tools):
    server = create_server("studio", tools=tools)
    assert _get_tool_names(server) == STUDIO_TOOLS


def test_unknown_mode_rejected(tools):
    with pytest.raises(ValueError, match="Unknown MCP mode"):
        create_server("data", tools=tools)


class TestPlacementTools:
    def test_list_ordered_by_label(self, tools):
        listed = tools.placements_list()["placements"]
        assert [p["id"] for p in listed] == ["p1", "p2"]
        assert set(listed[0]) == {"id", "label", "uuid", "status"}

    def test_save_creates_then_updates(self, tools):
        created = tools.placements_save("p3", "Footer")
        assert created["created"] is True
        assert created["placement"]["uuid"] == "uuid-p3"
        updated = tools.placements_save("p3", "Footer banner", status=False)
        assert updated["created"] is False
        assert updated["placement"]["label"] == "Footer banner"
        assert updated["placement"]["uuid"] == "uuid-p3"

    def test_save_invalid_payload_returns_errors(self, tools):
        out = tools.placements_save("Bad Id", "x")
        assert out["error"] == "invalid placement"
        assert out["valid"] is False
        assert any(e.startswith("id:") for e in out["errors"])

    def test_save_warns_when_label_is_id(self, tools):
        out = tools.placements_save("p4", "p4")
        assert out["warnings"]

    def test_get_missing_is_error_payload(self, tools):
        payload = json.loads(_invoke("placements_get", tools.placements_get, "nope"))
        assert "not found" in payload["error"]

    def test_delete(self, tools):
        assert tools.placements_delete("p1") == {"deleted": True, "placement_id": "p1"}
        assert tools.placements_delete("p1")["deleted"] is False


class TestContextTools:
    def test_rule_types_list(self, tools):
        ids = [r["id"] for r in tools.rule_types_list()["rule_types"]]
        assert ids == ["targeting", "turnoff", "device", "geo", "user_role"]

    def test_form_prefilled_from_value(self, tools):
        value = {"rule_type_id": "geo", "apply_to": ["p1"], "rule_settings": {"geo": {"countries": ["US"]}}}
        form = tools.context_form(json.dumps(value))["form"]
        names = [c["name"] for c in form["children"]]
        assert names == ["rule_type_id", "rule_settings", "apply_to"]
        assert form["children"][0]["default_value"] == "geo"
        assert form["children"][2]["default_value"] == ["p1"]

    def test_form_without_value(self, tools):
        form = tools.context_form()["form"]
        assert form["children"][0]["default_value"] == ""

    def test_massage_keeps_only_selected_settings(self, tools):
        values = [
            {
                "rule_type_id": "device",
                "apply_to": "p2",
                "rule_settings": {"device": {"target": "Mobile"}, "geo": {"countries": "US"}},
            },
            {"rule_type_id": "", "rule_settings": {}},
        ]
        out = tools.context_massage(json.dumps(values))
        assert out == {
            "values": [
                {"rule_type_id": "device", "apply_to": ["p2"], "rule_settings": {"device": {"target": "mobile"}}}
            ]
        }

    def test_massage_error_payload_carries_delta(self, tools):
        values = [{"rule_type_id": "geo", "rule_settings": {"geo": {"countries": "USA"}}}]
        payload = json.loads(_invoke("context_massage", tools.context_massage, json.dumps(values)))
        assert payload["delta"] == 0
        assert payload["rule_type_id"] == "geo"
        assert "USA" in payload["error"]

    def test_massage_rejects_non_array(self, tools):
        payload = json.loads(_invoke("context_massage", tools.context_massage, '{"a": 1}'))
        assert "JSON array" in payload["error"]

    def test_invalid_json_is_error_payload(self, tools):
        payload = json.loads(_invoke("context_massage", tools.context_massage, "[not json"))
        assert payload["error"].startswith("invalid values_json")

    def test_validate_collects_all_errors(self, tools):
        values = [
            {"rule_type_id": "geo", "rule_settings": {"geo": {"countries": "USA"}}},
            {"rule_type_id": "device", "apply_to": ["p9"], "rule_settings": {"device": {"target": "mobile"}}},
        ]
        out = tools.context_validate(json.dumps(values))
        assert out["valid"] is False
        assert len(out["errors"]) == 2
        assert "values" not in out

    def test_validate_returns_values_when_valid(self, tools):
        values = [{"rule_type_id": "turnoff", "rule_settings": {"turnoff": {}}}]
        out = tools.context_validate(json.dumps(values))
        assert out["valid"] is True
        assert out["values"] == [{"rule_type_id": "turnoff", "apply_to": [], "rule_settings": {"turnoff": {}}}]

    def test_resolve_by_placement(self, tools):
        stored = [
            {"rule_type_id": "turnoff", "apply_to": [], "rule_settings": {"turnoff": {}}},
            {"rule_type_id": "device", "apply_to": ["p2"], "rule_settings": {"device": {"target": "mobile"}}},
            {"rule_type_id": None, "apply_to": [], "rule_settings": {}},
        ]
        out = tools.context_resolve(json.dumps(stored), "p1")
        assert [c["rule_type_id"] for c in out["contexts"]] == ["turnoff"]
        out = tools.context_resolve(json.dumps(stored), "p2")
        assert [c["rule_type_id"] for c in out["contexts"]] == ["turnoff", "device"]


class TestInvokeAndMetrics:
    def test_success_counts_call(self, tools):
        payload = json.loads(_invoke("placements_list", tools.placements_list))
        assert len(payload["placements"]) == 2
        assert metrics_snapshot() == {"tool_calls": {"placements_list": 1}, "errors": {}}

    def test_domain_error_counts_error(self, tools):
        _invoke("placements_get", tools.placements_get, "nope")
        assert METRICS["errors"] == {"placements_get": 1}

    def test_unexpected_exception_propagates_and_is_counted(self):
        def boom() -> dict:
            raise RuntimeError("store offline")

        with pytest.raises(RuntimeError):
            _invoke("studio_health", boom)
        assert metrics_snapshot()["errors"] == {"studio_health": 1}

    def test_health_reports_counts(self, tools):
        health = tools.studio_health()
        assert health["status"] == "ok"
        assert health["placements"] == 2
        assert health["rule_types"] == 5
