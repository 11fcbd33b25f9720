from timesheet_insights.schemas.records import PerformanceRecord
from timesheet_insights.schemas.reports import DailyMatrixRow, ReportQuery, SortState
from timesheet_insights.services.query import filter_items, resolve_sort_value, sort_items


RECORDS = [
    PerformanceRecord(id=0, period="2025-11-01", name="bruno", leader_id="L1", processing_time_seconds=4000),
    PerformanceRecord(id=1, period="2025-11-01", name="Ana", leader_id="L2", processing_time_seconds=3600),
    PerformanceRecord(id=2, period="2025-11-02", name="Carla", leader_id="L1", processing_time_seconds=5000),
    PerformanceRecord(id=3, period="2025-11-02", name="Ana", leader_id="L2", processing_time_seconds=3700),
]


def test_filter_by_leader_with_all_collaborators() -> None:
    query = ReportQuery(leader="L1", collaborator="Todos")
    assert [record.id for record in filter_items(RECORDS, query)] == [0, 2]


def test_filter_is_a_conjunction() -> None:
    query = ReportQuery(leader="L2", collaborator="Ana", period="2025-11-02")
    assert [record.id for record in filter_items(RECORDS, query)] == [3]
    assert filter_items(RECORDS, ReportQuery(leader="L1", collaborator="Ana")) == []


def test_default_query_keeps_everything() -> None:
    assert filter_items(RECORDS, ReportQuery()) == RECORDS


def test_string_sort_is_case_insensitive() -> None:
    names = [record.name for record in sort_items(RECORDS, "name")]
    assert names == ["Ana", "Ana", "bruno", "Carla"]


def test_numeric_sort_descending() -> None:
    ordered = sort_items(RECORDS, "processing_time_seconds", descending=True)
    assert [record.id for record in ordered] == [2, 0, 3, 1]


def test_toggling_same_key_twice_restores_order() -> None:
    state = SortState().toggle("name")
    first = sort_items(RECORDS, state.key, state.descending)
    state = state.toggle("name")
    assert state.descending is True
    state = state.toggle("name")
    assert state.descending is False
    assert sort_items(RECORDS, state.key, state.descending) == first


def test_new_key_resets_to_ascending() -> None:
    state = SortState(key="name", descending=True).toggle("period")
    assert state == SortState(key="period", descending=False)


def test_dotted_key_reads_matrix_cells() -> None:
    rows = [
        DailyMatrixRow(name="Ana", values={"2025-11-01": "00:20:00"}, average_formatted="00:20:00"),
        DailyMatrixRow(name="Bruno", values={"2025-11-01": "-"}, average_formatted="-"),
        DailyMatrixRow(name="Carla", values={"2025-11-01": "00:05:00"}, average_formatted="00:05:00"),
    ]
    assert resolve_sort_value(rows[0], "values.2025-11-01") == "00:20:00"
    assert resolve_sort_value(rows[1], "values.2025-11-01") is None
    ordered = sort_items(rows, "values.2025-11-01", descending=True)
    assert [row.name for row in ordered] == ["Ana", "Carla", "Bruno"]


def test_matrix_cells_sort_on_their_seconds() -> None:
    rows = [
        DailyMatrixRow(name="Ana", values={"d1": "99:00:00"}, values_seconds={"d1": 356400}, average_formatted="99:00:00"),
        DailyMatrixRow(name="Bruno", values={"d1": "100:00:00"}, values_seconds={"d1": 360000}, average_formatted="100:00:00"),
        DailyMatrixRow(name="Carla", values={"d1": "-00:10:00"}, values_seconds={"d1": -600}, average_formatted="-00:10:00"),
        DailyMatrixRow(name="Davi", values={"d1": "-00:02:00"}, values_seconds={"d1": -120}, average_formatted="-00:02:00"),
        DailyMatrixRow(name="Eva", values={"d1": "-"}, average_formatted="-"),
    ]
    ordered = sort_items(rows, "values.d1")
    assert [row.name for row in ordered] == ["Carla", "Davi", "Ana", "Bruno", "Eva"]
    ordered = sort_items(rows, "values.d1", descending=True)
    assert [row.name for row in ordered] == ["Bruno", "Ana", "Davi", "Carla", "Eva"]
