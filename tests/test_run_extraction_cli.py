# tests/test_run_extraction_cli.py
import json

import pytest

import run_extraction


@pytest.mark.asyncio
async def test_cli_extracts_from_saved_html(tmp_path, capsys):
    page = tmp_path / "search.html"
    page.write_text(
        '<li><a href="/car/used/ad.html?finnkode=11">Hyundai Kona</a></li>',
        encoding="utf-8",
    )

    code = await run_extraction.main(["--file", str(page)])

    envelope = json.loads(capsys.readouterr().out)
    assert code == 0
    assert envelope["source"] == "file"
    assert envelope["items"][0]["link"] == "https://www.finn.no/car/used/ad.html?finnkode=11"


@pytest.mark.asyncio
async def test_cli_exit_code_when_nothing_matches(tmp_path, capsys):
    feed = tmp_path / "feed.xml"
    feed.write_text('<feed xmlns="http://www.w3.org/2005/Atom"/>', encoding="utf-8")

    code = await run_extraction.main(["--file", str(feed), "--kind", "atom_xml"])

    envelope = json.loads(capsys.readouterr().out)
    assert code == 1
    assert envelope["attempted"] == ["feed"]
