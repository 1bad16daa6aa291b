"""Tests for whole-diagram validation."""

from notation_rules.catalog import catalog_from_dict
from notation_rules.diagram import validate_diagram
from notation_rules.models import GraphEdge, GraphNode, Severity


def node(node_id: str, symbol: str, variant: str | None = None) -> GraphNode:
    return GraphNode(node_id, symbol, properties={"variant": variant} if variant else {})


def edges(*pairs: tuple[str, str]) -> list[GraphEdge]:
    return [GraphEdge(f"e{i}", s, t) for i, (s, t) in enumerate(pairs)]


def rule_ids(results) -> list[str]:
    return [r.rule_id for r in results]


FLOW = [
    node("s", "flowchart-terminal", "start"),
    node("p1", "flowchart-process"),
    node("d", "flowchart-decision"),
    node("p2", "flowchart-process"),
    node("p3", "flowchart-process"),
    node("x", "flowchart-terminal", "end"),
]
FLOW_EDGES = edges(("s", "p1"), ("p1", "d"), ("d", "p2"), ("d", "p3"), ("p2", "x"), ("p3", "x"))


class TestFlowchart:
    def test_valid_diagram(self) -> None:
        assert validate_diagram("flowchart", FLOW, FLOW_EDGES) == []

    def test_unknown_notation(self) -> None:
        results = validate_diagram("uml", FLOW, FLOW_EDGES)
        assert len(results) == 1
        assert results[0].rule_id == "unknown-notation"
        assert results[0].severity is Severity.ERROR

    def test_missing_start(self) -> None:
        nodes = [n for n in FLOW if n.id != "s"]
        results = validate_diagram("flowchart", nodes, [e for e in FLOW_EDGES if e.source != "s"])
        assert rule_ids(results) == ["entry-point-min"]
        assert results[0].node_id is None

    def test_two_starts(self) -> None:
        nodes = FLOW + [node("s2", "flowchart-terminal", "start")]
        results = validate_diagram("flowchart", nodes, FLOW_EDGES + edges(("s2", "p1")))
        assert rule_ids(results) == ["entry-point-max"]

    def test_missing_end(self) -> None:
        nodes = [n for n in FLOW if n.id != "x"]
        results = validate_diagram("flowchart", nodes, [e for e in FLOW_EDGES if e.target != "x"])
        assert rule_ids(results) == ["exit-point-min"]

    def test_decision_needs_two_branches(self) -> None:
        nodes = [n for n in FLOW if n.id != "p3"]
        results = validate_diagram(
            "flowchart", nodes, edges(("s", "p1"), ("p1", "d"), ("d", "p2"), ("p2", "x"))
        )
        assert rule_ids(results) == ["decision-branches"]
        assert results[0].node_id == "d"
        assert results[0].severity is Severity.ERROR

    def test_orphan_warning_once(self) -> None:
        results = validate_diagram("flowchart", FLOW + [node("lost", "flowchart-io")], FLOW_EDGES)
        assert rule_ids(results) == ["no-orphans"]
        assert results[0].node_id == "lost"
        assert results[0].severity is Severity.WARNING

    def test_unknown_symbol_is_only_an_orphan_concern(self) -> None:
        results = validate_diagram("flowchart", FLOW + [node("m", "mystery")], FLOW_EDGES + edges(("p1", "m")))
        assert results == []


class TestNotationRules:
    def test_bpmn_gateway_branches(self) -> None:
        nodes = [
            node("s", "bpmn-start-event"),
            node("g", "bpmn-gateway-exclusive"),
            node("j", "bpmn-gateway-parallel"),
            node("t", "bpmn-task"),
            node("e", "bpmn-end-event"),
        ]
        results = validate_diagram("bpmn", nodes, edges(("s", "g"), ("g", "j"), ("j", "t"), ("t", "e")))
        assert rule_ids(results) == ["gateway-branches"]
        assert results[0].node_id == "g"

    def test_erd_relationship_binary(self) -> None:
        nodes = [node("a", "erd-entity"), node("r", "erd-relationship"), node("b", "erd-entity")]
        assert validate_diagram("erd", nodes, edges(("a", "r"), ("r", "a"), ("r", "b"))) == []
        results = validate_diagram("erd", nodes, edges(("a", "r"), ("r", "b")))
        assert rule_ids(results) == ["relationship-binary"]
        assert results[0].node_id == "r"

    def test_code_inheritance_cycle(self) -> None:
        nodes = [node("A", "code-class"), node("B", "code-class"), node("C", "code-class")]
        assert validate_diagram("code", nodes, edges(("A", "B"), ("B", "C"))) == []
        results = validate_diagram("code", nodes, edges(("A", "B"), ("B", "C"), ("C", "A")))
        assert rule_ids(results) == ["no-circular-inheritance"]
        assert results[0].node_id == "A"

    def test_architecture_rules(self) -> None:
        nodes = [
            node("u", "arch-actor"),
            node("db", "arch-database"),
            node("lb", "arch-load-balancer"),
            node("svc", "arch-service"),
        ]
        results = validate_diagram("architecture", nodes, edges(("u", "db"), ("lb", "svc")))
        by_rule = {r.rule_id: r for r in results}
        assert set(by_rule) == {"actor-entry", "database-internal", "load-balancer-targets"}
        assert by_rule["actor-entry"].node_id == "u"
        assert by_rule["actor-entry"].severity is Severity.WARNING
        assert by_rule["database-internal"].node_id == "db"
        assert by_rule["load-balancer-targets"].severity is Severity.ERROR

    def test_architecture_clean(self) -> None:
        nodes = [
            node("u", "arch-actor"),
            node("lb", "arch-load-balancer"),
            node("s1", "arch-service"),
            node("s2", "arch-service"),
            node("db", "arch-database"),
        ]
        pairs = (("u", "lb"), ("lb", "s1"), ("lb", "s2"), ("s1", "db"), ("s2", "db"))
        assert validate_diagram("architecture", nodes, edges(*pairs)) == []

    def test_isolated_actor_is_only_an_orphan(self) -> None:
        nodes = [
            node("u", "arch-actor"),
            node("lb", "arch-load-balancer"),
            node("s1", "arch-service"),
            node("s2", "arch-service"),
        ]
        results = validate_diagram("architecture", nodes, edges(("lb", "s1"), ("lb", "s2")))
        assert [(r.rule_id, r.node_id, r.severity) for r in results] == [
            ("no-orphans", "u", Severity.WARNING)
        ]


class TestCustomCatalog:
    def test_runtime_branching_and_orphan_ids(self) -> None:
        catalog = catalog_from_dict({
            "symbols": [{"id": "fork", "shape": "diamond", "tags": ["fork"]},
                        {"id": "step", "shape": "rectangle"}],
            "notations": [{
                "id": "forks",
                "symbols": ["fork", "step"],
                "validation": {
                    "branching": {"tags": ["fork"], "min_outgoing": 3, "rule_id": "fork-fanout"},
                    "orphan_rule_id": "isolated",
                },
            }],
        })
        nodes = [node("f", "fork"), node("a", "step"), node("b", "step"), node("c", "step")]
        results = validate_diagram("forks", nodes, edges(("f", "a"), ("f", "b")), catalog)
        assert rule_ids(results) == ["fork-fanout", "isolated"]
        assert [r.node_id for r in results] == ["f", "c"]
