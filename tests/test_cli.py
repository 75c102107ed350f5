from __future__ import annotations

import json

import splitview.cli
from splitview.cli import create_argument_parser, guess_content_type, main
from splitview.config import get_config
from tests.helpers import make_xlsx


def test_parser_defaults() -> None:
    args = create_argument_parser().parse_args(["--input", "a.csv"])
    assert args.log_level == "WARNING"
    assert not args.local
    assert args.output is None


def test_guess_content_type(tmp_path) -> None:
    assert guess_content_type(tmp_path / "a.csv") == "text/csv"
    assert guess_content_type(tmp_path / "a.unknownext") == "application/octet-stream"


def test_local_csv_is_rendered_and_written(tmp_path, capsys) -> None:
    source = tmp_path / "data.csv"
    source.write_text("name,city\nAnn,Hanoi\n", encoding="utf-8")
    output = tmp_path / "table.html"

    code = main(["--input", str(source), "--output", str(output)])

    assert code == 0
    printed = capsys.readouterr().out
    summary = json.loads(printed[:printed.index("}") + 1])
    assert summary == {"kind": "table", "sheets": ["Sheet1"], "active_sheet": "Sheet1"}
    assert "Hanoi" in output.read_text(encoding="utf-8")


def test_sheet_selection(tmp_path, capsys) -> None:
    source = tmp_path / "book.xlsx"
    source.write_bytes(make_xlsx({"One": [["a"]], "Two": [["b"]]}))

    assert main(["--input", str(source), "--sheet", "Two"]) == 0
    assert '"active_sheet": "Two"' in capsys.readouterr().out

    assert main(["--input", str(source), "--sheet", "Three"]) == 1


def test_empty_csv_exits_with_error(tmp_path, capsys) -> None:
    source = tmp_path / "empty.csv"
    source.write_text("", encoding="utf-8")

    assert main(["--input", str(source)]) == 1
    assert "No data found in the CSV file" in capsys.readouterr().out


def test_proxy_flag_leaves_global_config_alone(tmp_path, monkeypatch) -> None:
    clients = []

    class RecordingProxyClient(splitview.cli.HttpProxyClient):
        def __init__(self, base_url, timeout):
            clients.append(base_url)
            super().__init__(base_url, timeout=timeout)

    monkeypatch.setattr(splitview.cli, "HttpProxyClient", RecordingProxyClient)
    source = tmp_path / "data.csv"
    source.write_text("a\n1\n", encoding="utf-8")
    before = get_config().viewer.proxy_base_url

    assert main(["--input", str(source), "--proxy", "http://proxy.test:9000/"]) == 0

    assert clients == ["http://proxy.test:9000"]
    assert get_config().viewer.proxy_base_url == before
