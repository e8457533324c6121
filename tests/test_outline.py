from gridbook import LayoutEngine, Section, Worksheet
from gridbook.outline import build_outline_nodes, extract_outline


def test_collapsed_flag_marks_innermost_group_only():
    level_map = {
        1: {"level": 1},
        2: {"level": 2, "collapsed": True},
        3: {"level": 2},
        4: {"level": 1},
        6: {"level": 1, "hidden": True},
    }

    first, second = build_outline_nodes(level_map, axis="row", sheet="Budget")
    assert (first.level, first.start, first.end) == (1, 1, 4)
    assert first.collapsed is False
    (inner,) = first.children
    assert (inner.level, inner.start, inner.end) == (2, 2, 3)
    assert inner.collapsed is True
    assert (second.start, second.end, second.collapsed) == (6, 6, True)


def test_gaps_close_open_groups():
    nodes = build_outline_nodes({1: {"level": 1}, 2: {"level": 1}, 5: {"level": 1}}, axis="col", sheet="S")
    assert [(node.start, node.end) for node in nodes] == [(1, 2), (5, 5)]
    assert nodes[0].as_dict()["axis"] == "col"
    assert build_outline_nodes({}, axis="row", sheet="S") == []


def test_extract_outline_from_rendered_sections():
    sheet = Worksheet("Sections")
    LayoutEngine(sheet).add_section(
        Section(
            title="Outer",
            data=[{"v": 1}],
            fields=["v"],
            subsections=[Section(title="Inner", level=1, collapsed=True, data=[{"v": 2}])],
        )
    )

    tree = extract_outline(sheet)
    assert tree["cols"] == []
    (outer,) = tree["rows"]
    assert (outer.level, outer.start, outer.end) == (1, 2, 4)
    assert outer.collapsed is True
    assert outer.children == []
