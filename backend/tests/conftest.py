"""Shared fixtures: record factory, sample project exports, isolated DB dir."""

import pytest

from tasks.builder import build

PROJECT_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Project xmlns="http://schemas.microsoft.com/project">
  <Name>Office Move</Name>
  <Tasks>
    <Task>
      <UID>0</UID>
      <Name>Office Move</Name>
      <OutlineLevel>0</OutlineLevel>
      <WBS>0</WBS>
    </Task>
    <Task>
      <UID>1</UID>
      <Name>Planning</Name>
      <WBS>1</WBS>
      <OutlineLevel>1</OutlineLevel>
      <Start>2024-03-04T08:00:00</Start>
      <Finish>2024-03-06T17:00:00</Finish>
      <Duration>PT24H0M0S</Duration>
      <Critical>1</Critical>
    </Task>
    <Task>
      <UID>2</UID>
      <Name>Survey floor</Name>
      <WBS>1.1</WBS>
      <OutlineLevel>2</OutlineLevel>
      <Start>2024-03-04T08:00:00</Start>
      <Finish>2024-03-05T17:00:00</Finish>
      <Duration>PT16H0M0S</Duration>
      <Critical>1</Critical>
    </Task>
    <Task>
      <UID>3</UID>
      <Name>Seating plan</Name>
      <WBS>1.2</WBS>
      <OutlineLevel>2</OutlineLevel>
      <Duration>PT8H0M0S</Duration>
      <Critical>0</Critical>
      <PredecessorLink>
        <PredecessorUID>2</PredecessorUID>
        <Type>1</Type>
      </PredecessorLink>
    </Task>
    <Task>
      <UID>4</UID>
      <Name>Move</Name>
      <WBS>2</WBS>
      <OutlineLevel>1</OutlineLevel>
      <Duration>PT8H0M0S</Duration>
      <PredecessorLink>
        <PredecessorUID>3</PredecessorUID>
      </PredecessorLink>
      <PredecessorLink>
        <PredecessorUID>99</PredecessorUID>
      </PredecessorLink>
    </Task>
    <Task>
      <UID>5</UID>
      <OutlineLevel>1</OutlineLevel>
    </Task>
  </Tasks>
</Project>
"""


@pytest.fixture
def make_record():
    def _make(uid, wbs, level, preds=(), **extra):
        record = {
            "UID": uid,
            "Name": extra.pop("name", f"Task {uid}"),
            "WBS": wbs,
            "OutlineLevel": level,
            "PredecessorUIDs": list(preds),
        }
        record.update(extra)
        return record
    return _make


@pytest.fixture
def build_graph(make_record):
    """Build a graph from (uid, wbs, level, preds) tuples."""
    def _build(rows):
        return build([make_record(*row) for row in rows]).graph
    return _build


@pytest.fixture
def project_xml():
    return PROJECT_XML


@pytest.fixture
def db_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("SPV_DB_DIR", str(tmp_path))
    return tmp_path
