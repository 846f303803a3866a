"""Тесты импорта/экспорта Excel."""
import io
from datetime import date, datetime
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from asset_tracker.core.database import Database
from asset_tracker.core.exceptions import ImportRejectedError, ValidationError
from asset_tracker.modules.assets.services.spreadsheet import (
    EXPORT_HEADERS,
    AssetImporter,
    RawRow,
    cell_to_text,
    export_workbook,
    normalize_header,
)
from asset_tracker.modules.assets.services.storage import AssetStorage, asset_fields

HEADERS = ["Asset Name", "Asset Type", "Asset Tag", "Serial Number", "Cost", "Acquisition Date"]


def _existing(storage, tag="LP-001"):
    return storage.create(
        {"name": "Existing", "type": "laptop", "tag": tag, "cost": Decimal("999.00")}
    )


def test_normalize_header():
    assert normalize_header(" Asset Name ") == "assetname"
    assert normalize_header("asset_name") == "assetname"
    assert normalize_header("ASSET-NAME") == "assetname"


def test_cell_to_text():
    assert cell_to_text(None) is None
    assert cell_to_text("   ") is None
    assert cell_to_text(1001.0) == "1001"
    assert cell_to_text(12.5) == "12.5"
    assert cell_to_text(datetime(2024, 3, 1, 0, 0)) == "2024-03-01"
    assert cell_to_text(date(2024, 3, 1)) == "2024-03-01"


def test_alias_priority_is_fixed():
    row = RawRow.from_cells({"name": "lower", "Name": "pascal", "Asset Name": "canonical"})
    assert row.name == "canonical"
    row = RawRow.from_cells({"asset_name": "snake", "name": "bare"})
    assert row.name == "snake"
    row = RawRow.from_cells({"Price": 10, "cost": 20})
    assert row.cost == "20"


def test_header_matching_ignores_case_and_spacing():
    row = RawRow.from_cells(
        {"ASSET NAME": "Dell", "asset type": "laptop", "Asset-Tag": "T1", "COST": 5, "serial  number": "S"}
    )
    assert (row.name, row.type, row.tag, row.cost, row.serial_number) == ("Dell", "laptop", "T1", "5", "S")


def test_import_valid_rows(storage, make_workbook):
    content = make_workbook(
        HEADERS,
        [
            ["Dell XPS", "laptop", "LP-001", "SN-1", 1200, datetime(2024, 1, 15)],
            ["LG 27", "monitor", "MN-001", None, "300.5", None],
        ],
    )
    created, errors = AssetImporter(storage).import_workbook(content)

    assert errors == []
    assert [a.tag for a in created] == ["LP-001", "MN-001"]
    assert created[0].cost == Decimal("1200.00")
    assert created[0].acquisition_date == date(2024, 1, 15)
    assert created[1].serial_number is None
    assert created[1].cost == Decimal("300.50")


def test_row_missing_cost_is_reported_and_others_import(storage, make_workbook):
    content = make_workbook(
        HEADERS,
        [
            ["Dell XPS", "laptop", "LP-001", None, 1200, None],
            ["No Cost", "monitor", "MN-001", None, None, None],
            ["Chair", "furniture", "FN-001", None, 80, None],
        ],
    )
    created, errors = AssetImporter(storage).import_workbook(content)

    assert errors == ["Row 3: Missing required fields (Name, Type, Tag, Cost)"]
    assert [a.tag for a in created] == ["LP-001", "FN-001"]


def test_zero_cost_is_not_missing(storage, make_workbook):
    content = make_workbook(HEADERS, [["Donated chair", "furniture", "FN-9", None, 0, None]])
    created, errors = AssetImporter(storage).import_workbook(content)
    assert errors == []
    assert created[0].cost == Decimal("0.00")


def test_duplicate_of_persisted_tag_does_not_modify_existing(storage, make_workbook):
    existing = _existing(storage)
    content = make_workbook(
        HEADERS,
        [
            ["Dell XPS", "laptop", "LP-001", None, 1200, None],
            ["Mouse", "other", "OT-001", None, 20, None],
        ],
    )
    created, errors = AssetImporter(storage).import_workbook(content)

    assert errors == ["Row 2: Asset tag 'LP-001' already exists"]
    assert [a.tag for a in created] == ["OT-001"]
    assert storage.get_by_id(existing.id).name == "Existing"
    assert storage.get_by_id(existing.id).cost == Decimal("999.00")


def test_all_rows_rejected(storage, make_workbook):
    _existing(storage)
    content = make_workbook(
        ["name", "type", "tag", "cost"],
        [
            ["Dell XPS", "laptop", "LP-001", "1200.00"],
            ["Bad Row", "monitor", "LP-001", "300"],
        ],
    )
    with pytest.raises(ImportRejectedError) as exc_info:
        AssetImporter(storage).import_workbook(content)

    assert exc_info.value.row_errors == [
        "Row 2: Asset tag 'LP-001' already exists",
        "Row 3: Asset tag 'LP-001' already exists",
    ]
    assert exc_info.value.to_dict()["imported"] == 0
    assert len(storage.get_all()) == 1


def test_duplicate_tag_within_file(storage, make_workbook):
    content = make_workbook(
        HEADERS,
        [
            ["A", "laptop", "DUP", None, 1, None],
            ["B", "laptop", "DUP", None, 2, None],
        ],
    )
    created, errors = AssetImporter(storage).import_workbook(content)
    assert [a.name for a in created] == ["A"]
    assert errors == ["Row 3: Duplicate asset tag 'DUP' in file"]


def test_validation_errors_are_aggregated_per_row(storage, make_workbook):
    content = make_workbook(
        HEADERS,
        [
            ["Good", "laptop", "G-1", None, 10, None],
            ["Bad", "laptop", "B-1", None, "abc", "not a date"],
        ],
    )
    created, errors = AssetImporter(storage).import_workbook(content)

    assert len(created) == 1
    assert len(errors) == 1
    assert errors[0].startswith("Row 3: ")
    assert "cost" in errors[0]
    assert "acquisitionDate" in errors[0] or "acquisition_date" in errors[0]


def test_blank_rows_are_skipped_but_numbering_follows_sheet(storage, make_workbook):
    content = make_workbook(
        HEADERS,
        [
            ["A", "laptop", "A-1", None, 1, None],
            [None, None, None, None, None, None],
            ["B", "laptop", None, None, 1, None],
        ],
    )
    created, errors = AssetImporter(storage).import_workbook(content)
    assert len(created) == 1
    assert errors == ["Row 4: Missing required fields (Name, Type, Tag, Cost)"]


def test_empty_workbook(storage, make_workbook):
    with pytest.raises(ValidationError) as exc_info:
        AssetImporter(storage).import_workbook(make_workbook(HEADERS, []))
    assert exc_info.value.message == "Excel file is empty"


def test_unreadable_file(storage):
    with pytest.raises(ValidationError) as exc_info:
        AssetImporter(storage).import_workbook(b"definitely not a workbook")
    assert exc_info.value.message == "Failed to read Excel file"


def test_export_layout(storage):
    storage.create(
        {
            "name": "Dell XPS",
            "type": "laptop",
            "tag": "LP-001",
            "serial_number": "SN-1",
            "cost": Decimal("1200"),
            "acquisition_date": date(2024, 1, 15),
        }
    )
    storage.create({"name": "Desk", "type": "furniture", "tag": "FN-001", "cost": Decimal("80.5")})

    wb = load_workbook(io.BytesIO(export_workbook(storage.get_all())))
    ws = wb.worksheets[0]
    rows = list(ws.iter_rows(values_only=True))

    assert ws.title == "Assets"
    assert list(rows[0]) == EXPORT_HEADERS
    assert list(rows[1]) == ["Dell XPS", "laptop", "LP-001", "SN-1", "1200.00", "2024-01-15"]
    assert rows[2][:3] == ("Desk", "furniture", "FN-001")
    assert rows[2][3] in (None, "")
    assert rows[2][4] == "80.50"
    assert rows[2][5] in (None, "")


def test_export_then_import_round_trip(storage, tmp_path):
    storage.create(
        {
            "name": "Dell XPS",
            "type": "laptop",
            "tag": "LP-001",
            "serial_number": "SN-1",
            "cost": Decimal("1200"),
            "acquisition_date": date(2024, 1, 15),
        }
    )
    storage.create({"name": "Desk", "type": "furniture", "tag": "FN-001", "cost": Decimal("0.1")})
    content = export_workbook(storage.get_all())

    other_db = Database(f"sqlite:///{tmp_path / 'empty.db'}")
    other_db.create_all()
    session = other_db.SessionLocal()
    try:
        empty_storage = AssetStorage(session)
        created, errors = AssetImporter(empty_storage).import_workbook(content)

        assert errors == []
        assert [asset_fields(a) for a in created] == [asset_fields(a) for a in storage.get_all()]
    finally:
        session.close()
        other_db.dispose()


def test_canonical_alias_wins_over_exact_lower_priority_header():
    row = RawRow.from_cells({"Name": "pascal", "asset name": "canonical"})
    assert row.name == "canonical"


def test_oversized_cost_rejects_only_that_row(storage, make_workbook):
    content = make_workbook(
        HEADERS,
        [
            ["Good", "laptop", "G-1", None, 10, None],
            ["Huge", "laptop", "H-1", None, "9" * 29, None],
            ["Too expensive", "vehicle", "V-1", None, "100000000", None],
            ["Float overflow", "vehicle", "V-2", None, 1e30, None],
        ],
    )
    created, errors = AssetImporter(storage).import_workbook(content)

    assert [a.tag for a in created] == ["G-1"]
    assert [e.split(":")[0] for e in errors] == ["Row 3", "Row 4", "Row 5"]
    assert all("must not exceed" in e for e in errors)
