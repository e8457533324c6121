from datetime import date, datetime

import pandas as pd
import pytest

from gridbook import (
    Border,
    BorderSide,
    Cell,
    CellType,
    InvalidRangeError,
    MergeRegion,
    PrintOptions,
    StyleBuilder,
    Workbook,
    Worksheet,
)


def test_cell_classifies_once_on_assignment():
    assert Cell("text").type is CellType.STRING
    assert Cell(3.5).type is CellType.NUMBER
    assert Cell(True).type is CellType.BOOLEAN
    assert Cell(date(2024, 2, 1)).type is CellType.DATE
    assert Cell(datetime(2024, 2, 1, 8, 30)).formatted_value() == "2024-02-01"
    assert Cell(False).formatted_value() == "FALSE"
    assert Cell(30).formatted_value() == "30"
    assert Cell(2.0).formatted_value() == "2"
    assert Cell(float("nan")).formatted_value() == "NaN"
    assert Cell().is_blank


def test_set_formula_strips_leading_equals():
    cell = Cell(1).set_formula("=SUM(A1:A3)")
    assert cell.type is CellType.FORMULA
    assert cell.formula == "SUM(A1:A3)"
    assert cell.formatted_value() == "SUM(A1:A3)"
    cell.set_value("plain")
    assert cell.formula is None and cell.type is CellType.STRING


def test_row_and_sheet_auto_extend_on_write_but_not_on_read():
    sheet = Worksheet("Grid")
    assert sheet.get_row(0) is None
    assert sheet.get_cell(4, 4) is None

    sheet.set_cell(2, 3, "x")
    assert len(sheet.rows) == 3
    assert len(sheet.rows[2].cells) == 4
    assert sheet.get_cell(2, 3).value == "x"
    assert sheet.get_cell(2, 2).is_blank
    assert sheet.get_cell(2, 10) is None
    assert sheet.dimensions() == (3, 4)


def test_remove_out_of_range_is_a_no_op():
    workbook = Workbook()
    workbook.create_sheet("Only")
    assert workbook.remove_sheet(5) is workbook
    assert workbook.sheet_names == ["Only"]
    sheet = workbook.get_sheet(0)
    sheet.create_row()
    sheet.remove_row(3)
    assert len(sheet.rows) == 1


def test_outline_level_bounds():
    sheet = Worksheet("Outline")
    sheet.set_outline_level(0, 7, collapsed=True)
    assert sheet.rows[0].outline_level == 7
    assert sheet.rows[0].collapsed is True
    with pytest.raises(ValueError):
        sheet.set_outline_level(1, 8)
    with pytest.raises(ValueError):
        sheet.set_column_outline_level(0, -1)


def test_merges_reject_overlap_and_inversion():
    sheet = Worksheet("Merged")
    sheet.merge_range("A1:C1")
    sheet.merge_cells(1, 0, 2, 0)
    assert [region.reference for region in sheet.merges] == ["A1:C1", "A2:A3"]

    with pytest.raises(InvalidRangeError) as excinfo:
        sheet.merge_range("B1:B2")
    assert excinfo.value.details["existing"] == "A1:C1"
    with pytest.raises(InvalidRangeError):
        MergeRegion(3, 0, 1, 0)
    with pytest.raises(InvalidRangeError):
        MergeRegion(-1, 0, 1, 0)
    assert MergeRegion.from_reference("A1:C4") == MergeRegion(0, 0, 3, 2)


def test_column_width_validation():
    sheet = Worksheet("Cols")
    assert sheet.create_column(0).width == 0
    with pytest.raises(ValueError):
        sheet.create_column(-2)


def test_style_builder_snapshots_are_independent():
    builder = StyleBuilder().bold()
    first = builder.build()
    second = builder.italic().color("#ff0000").build()

    assert first.bold is True and first.italic is None
    assert second.italic is True and second.color == "#ff0000"
    with pytest.raises(ValueError):
        StyleBuilder().align("justify")
    with pytest.raises(ValueError):
        StyleBuilder().border_all("wavy")


def test_border_all_sets_equal_sides():
    style = StyleBuilder().border_all("medium", "#333333").build()
    sides = {style.border.top, style.border.right, style.border.bottom, style.border.left}
    assert sides == {BorderSide("medium", "#333333")}
    assert Border.all("medium", "#333333") == style.border


def test_style_merge_later_fields_win():
    base = StyleBuilder().bold().color("#000000").border_top().build()
    overlay = StyleBuilder().color("#ffffff").border_bottom("thick").build()
    merged = base.merge(overlay)
    assert merged.bold is True
    assert merged.color == "#ffffff"
    assert merged.border.top == BorderSide("thin")
    assert merged.border.bottom == BorderSide("thick")


def test_workbook_round_trip_through_plain_data():
    workbook = Workbook(properties={"title": "Quarterly", "keywords": ["a", "b"]})
    sheet = workbook.create_sheet("Report")
    sheet.append_header(["Name", "Joined", "Active"], StyleBuilder().bold().fill("#eeeeee").build())
    sheet.append_records([["Ann", date(2023, 5, 1), True], ["Bob", None, False]])
    sheet.row(3).cell(1).set_formula("COUNTA(A2:A3)")
    sheet.row(3).cell(2).set_type(CellType.FORMULA)
    sheet.set_outline_level(1, 1)
    sheet.create_column(0)
    sheet.column(2).set_hidden()
    sheet.merge_range("A5:C5")
    sheet.set_freeze_pane(rows=1)
    sheet.set_print_options(
        PrintOptions(orientation="landscape", fit_to_width=1, repeat_rows=(0, 0), margins={"left": 0.5})
    )

    restored = Workbook.from_data(workbook.to_data())
    assert restored == workbook
    assert restored.to_data() == workbook.to_data()


def test_frame_conversion(people_workbook):
    frame = people_workbook.get_sheet(0).to_frame()
    assert list(frame.columns) == ["Name", "Age"]
    assert frame["Age"].tolist() == [30, 25]

    sheet = Worksheet.from_frame("Copy", pd.DataFrame({"x": [1.5, None], "y": ["a", "b"]}))
    assert sheet.rows[0].values() == ["x", "y"]
    assert sheet.rows[1].values() == [1.5, "a"]
    assert sheet.rows[2].values() == [None, "b"]
