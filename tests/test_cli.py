"""Tests for the stock_ledger command line."""

import pytest
from stock_ledger.__main__ import build_parser, main


@pytest.fixture
def store(tmp_path):
    data = tmp_path / "inventory.csv"
    data.write_text(
        "Rice,40,N/A,Pantry,false\n"
        "Apple,50,2025-05-10,Vegetables & Fruits,true\n",
        encoding="utf-8",
    )
    config = tmp_path / "store.yaml"
    config.write_text("managers:\n  - alex\n", encoding="utf-8")
    return data, config


def _run(store, *args: str) -> None:
    data, config = store
    main(["--file", str(data), "--config", str(config), *args])


def test_no_command_exits(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1


def test_parser_rejects_unknown_operator():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["adjust", "Rice", "*", "2"])


class TestReadCommands:
    def test_show(self, store, capsys):
        _run(store, "show")
        out = capsys.readouterr().out
        assert "Pantry (1 items, 40 units)" in out
        assert "Apple - 50 units (perishable, 1 batch) [Vegetables & Fruits]" in out

    def test_report(self, store, capsys):
        _run(store, "report", "--today", "2025-05-05")
        out = capsys.readouterr().out
        assert "Expiring within 7 days: 1 batches" in out
        assert "Most stocked: Apple (50 units)" in out

    def test_summary_requires_manager(self, store, capsys):
        with pytest.raises(SystemExit) as exc:
            _run(store, "summary", "--manager", "jordan")
        assert exc.value.code == 1
        assert "not a recognized manager" in capsys.readouterr().err

    def test_summary(self, store, capsys):
        _run(store, "summary", "--manager", "ALEX")
        out = capsys.readouterr().out
        assert "Items tracked: 2" in out
        assert "Units on hand: 90" in out


class TestWriteCommands:
    def test_add_item(self, store, capsys):
        data, _ = store
        _run(store, "add-item", "Salt", "--section", "Pantry", "--quantity", "3")
        assert "Salt,3,N/A,Pantry,false" in data.read_text(encoding="utf-8")
        assert "Added Salt" in capsys.readouterr().out

    def test_add_duplicate_fails(self, store, capsys):
        with pytest.raises(SystemExit) as exc:
            _run(store, "add-item", "rice", "--section", "Pantry")
        assert exc.value.code == 1
        assert "Item already exists" in capsys.readouterr().err

    def test_restock_credits_manager(self, store, capsys):
        data, _ = store
        _run(
            store,
            "restock", "Apple",
            "--quantity", "5",
            "--expires", "2025-05-10",
            "--manager", "alex",
        )
        out = capsys.readouterr().out
        assert "Credited alex with 5 units" in out
        assert "Apple,55,2025-05-10" in data.read_text(encoding="utf-8")

    def test_restock_unknown_manager(self, store):
        data, _ = store
        before = data.read_text(encoding="utf-8")
        with pytest.raises(SystemExit):
            _run(store, "restock", "Apple", "--quantity", "5",
                 "--expires", "2025-05-10", "--manager", "jordan")
        assert data.read_text(encoding="utf-8") == before

    def test_adjust(self, store):
        data, _ = store
        _run(store, "adjust", "Rice", "-", "15")
        assert "Rice,25,N/A,Pantry,false" in data.read_text(encoding="utf-8")

    def test_adjust_below_zero(self, store, capsys):
        with pytest.raises(SystemExit):
            _run(store, "adjust", "Rice", "-", "41")
        assert "Insufficient stock" in capsys.readouterr().err

    def test_order(self, store, capsys):
        data, _ = store
        _run(store, "order", "10 apples", "2 pears")
        out = capsys.readouterr().out
        assert "[OK] '10 apples': Fulfilled 10 x Apple, 40 remaining" in out
        assert "1 of 2 orders fulfilled." in out
        assert "Apple,40,2025-05-10" in data.read_text(encoding="utf-8")

    def test_missing_data_file_starts_empty(self, tmp_path, capsys):
        data = tmp_path / "new.csv"
        main(["--file", str(data), "add-item", "Tape", "--section", "Hardware"])
        assert data.read_text(encoding="utf-8") == "Tape,0,N/A,Hardware,false\n"
