"""Tests for XML and document-store ingestion."""

from datetime import datetime

import orjson
import pytest

from ingest import (
    IngestError,
    parse_duration_hours,
    parse_project_xml,
    parse_task_document,
    to_record_dicts,
    to_task_document,
)
from tasks.builder import build


class TestDuration:
    @pytest.mark.parametrize("text,hours", [
        ("PT16H0M0S", 16.0),
        ("PT7H30M0S", 7.5),
        ("P1DT4H", 28.0),
        ("P2D", 48.0),
        ("", 0.0),
        (None, 0.0),
        ("sixteen hours", 0.0),
    ])
    def test_parse(self, text, hours):
        assert parse_duration_hours(text) == pytest.approx(hours)


class TestProjectXml:
    def test_records(self, project_xml):
        records = parse_project_xml(project_xml)
        # the nameless row is dropped, the summary row is kept for the builder
        assert [r.id for r in records] == ["0", "1", "2", "3", "4"]
        planning = records[1]
        assert planning.name == "Planning"
        assert planning.duration == pytest.approx(3.0)
        assert planning.critical == "1"
        assert planning.outline_level == "1"
        assert records[3].predecessor_uids == ["2"]
        assert records[4].predecessor_uids == ["3", "99"]

    def test_hours_per_day(self, project_xml):
        records = parse_project_xml(project_xml.encode("utf-8"), hours_per_day=4.0)
        assert records[2].duration == pytest.approx(4.0)

    def test_builds_graph(self, project_xml):
        result = build(parse_project_xml(project_xml))
        graph = result.graph
        assert sorted(graph.ids()) == ["1", "2", "3", "4"]
        assert graph.children("1") == ["2", "3"]
        assert graph.predecessors("3") == ["2"]
        assert graph.predecessors("4") == ["3"]
        assert graph.get("1").start == datetime(2024, 3, 4, 8, 0)
        assert graph.critical_ids() == ["1", "2"]
        kinds = sorted(d.kind for d in result.diagnostics)
        assert kinds == ["DanglingReference", "ParseSkip"]

    def test_invalid_xml(self):
        with pytest.raises(IngestError):
            parse_project_xml("<Project><Tasks>")

    def test_no_tasks(self):
        xml = '<Project xmlns="http://schemas.microsoft.com/project"><Tasks/></Project>'
        assert parse_project_xml(xml) == []

    def test_stored_records_rebuild_the_same_graph(self, project_xml):
        records = parse_project_xml(project_xml)
        stored = orjson.loads(orjson.dumps(to_record_dicts(records)))
        assert stored[1]["UID"] == "1"
        assert stored[1]["OutlineLevel"] == "1"
        first, second = build(records).graph, build(stored).graph
        assert first.edges() == second.edges()
        assert first.to_payload() == second.to_payload()


class TestTaskDocument:
    def test_hours_become_days(self):
        doc = {"tasks": [{"UID": "1", "Name": "A", "Duration": 16, "OutlineLevel": 1, "WBS": "1"}]}
        records = parse_task_document(doc)
        assert records[0]["Duration"] == pytest.approx(2.0)
        assert build(records).graph.get("1").duration == pytest.approx(2.0)

    def test_bare_list_and_bytes(self):
        payload = orjson.dumps([{"UID": "1", "Name": "A", "Duration": 8, "OutlineLevel": "1", "WBS": "1"}])
        records = parse_task_document(payload, hours_per_day=4.0)
        assert records[0]["Duration"] == pytest.approx(2.0)

    def test_both_predecessor_fields(self):
        doc = {"tasks": [
            {"UID": "1", "Name": "A", "OutlineLevel": 1, "WBS": "1"},
            {"UID": "2", "Name": "B", "OutlineLevel": 1, "WBS": "2"},
            {"UID": "3", "Name": "C", "OutlineLevel": 1, "WBS": "3",
             "Predecessors": ["1"], "PredecessorUIDs": ["2", "1"]},
        ]}
        graph = build(parse_task_document(doc)).graph
        assert graph.predecessors("3") == ["2", "1"]

    def test_damaged_json_is_repaired(self):
        text = '{"tasks": [{"UID": "1", "Name": "A", "OutlineLevel": 1, "WBS": "1", "Duration": 8}'
        records = parse_task_document(text)
        assert records[0]["UID"] == "1"
        assert records[0]["Duration"] == pytest.approx(1.0)

    def test_missing_task_list(self):
        with pytest.raises(IngestError):
            parse_task_document({"items": []})

    def test_unreadable_duration_is_left_for_the_builder(self):
        records = parse_task_document({"tasks": [{"UID": "1", "OutlineLevel": 1, "Duration": "long"}]})
        assert records[0]["Duration"] == "long"

    def test_export(self, project_xml):
        graph = build(parse_project_xml(project_xml)).graph
        doc = to_task_document(graph)
        by_id = {t["UID"]: t for t in doc["tasks"]}
        assert by_id["1"]["Critical"] == "1"
        assert by_id["3"]["Critical"] == "0"
        assert by_id["1"]["Start"] == "2024-03-04T08:00:00"
        assert by_id["3"]["Start"] == ""
        assert by_id["2"]["Duration"] == pytest.approx(16.0)
        assert by_id["4"]["Predecessors"] == ["3", "99"]
        assert by_id["4"]["PredecessorUIDs"] == ["3", "99"]
