import pytest

from gridbook import ExportFormat, UnsupportedFormatError, load_config


def test_load_config_reads_export_and_layout(tmp_path):
    path = tmp_path / "gridbook.yaml"
    path.write_text(
        "\n".join(
            [
                "export:",
                "  format: csv",
                "  includeHidden: false",
                "  filename: report.csv",
                "  delimiterHint: ';'",
                "layout:",
                "  headerColors: ['#111111', '#222222']",
                "  keySeparator: ' / '",
            ]
        ),
        encoding="utf-8",
    )

    config = load_config(path)
    assert config.export.format is ExportFormat.CSV
    assert config.export.include_hidden is False
    assert config.export.resolved_filename == "report.csv"
    assert config.export.extra == {"delimiterHint": ";"}
    assert config.layout.key_separator == " / "
    assert config.layout.header_color(0) == "#111111"
    assert config.layout.header_color(5) == "#222222"
    assert config.layout.expanded_indicator == "▼"


def test_empty_config_uses_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    config = load_config(path)
    assert config.export.format is ExportFormat.XLSX
    assert config.layout.header_color(0) == "#e6f2ff"


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "content",
    ["- just\n- a list\n", "export: [1, 2]\n", "layout:\n  fancy: true\n", "layout:\n  headerColors: []\n"],
)
def test_malformed_config_sections(tmp_path, content):
    path = tmp_path / "bad.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_unknown_export_format_in_config(tmp_path):
    path = tmp_path / "format.yaml"
    path.write_text("export:\n  format: pdf\n", encoding="utf-8")
    with pytest.raises(UnsupportedFormatError):
        load_config(path)
