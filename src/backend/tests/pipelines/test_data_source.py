import json

import pytest

from common.health_check.models import FarmSnapshot
from pipelines.data_source import JsonFileDataSource, StaticDataSource, get_data_source


def test_json_source_rereads_file_each_call(tmp_path):
    path = tmp_path / "farm.json"
    path.write_text(json.dumps({"animals": [{"id": "g1"}]}), encoding="utf-8")
    source = JsonFileDataSource(path)

    assert len(source.load_snapshot().animals) == 1

    path.write_text(json.dumps({"animals": [{"id": "g1"}, {"id": "g2"}]}), encoding="utf-8")
    assert len(source.load_snapshot().animals) == 2


def test_get_data_source(tmp_path):
    assert isinstance(get_data_source("json", path=tmp_path / "x.json"), JsonFileDataSource)
    empty = get_data_source("EMPTY")
    assert isinstance(empty, StaticDataSource)
    assert empty.load_snapshot() == FarmSnapshot()

    with pytest.raises(ValueError, match="requires a path"):
        get_data_source("json")
    with pytest.raises(ValueError, match="Unknown data source"):
        get_data_source("postgres")
