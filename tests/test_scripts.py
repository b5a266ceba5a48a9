from scripts.backup_data import backup_data


def test_backup_keeps_newest_copies(tmp_path):
    data = tmp_path / "data.json"
    data.write_text('{"enquiries": [], "users": [], "advertisements": []}', encoding="utf-8")
    backups = tmp_path / "backups"
    backups.mkdir()
    for stamp in ("20240101-000000", "20240102-000000", "20240103-000000"):
        (backups / f"data_{stamp}.json").write_text("{}", encoding="utf-8")

    created = backup_data(data, backups, keep=2)

    assert created.read_text(encoding="utf-8") == data.read_text(encoding="utf-8")
    assert sorted(p.name for p in backups.iterdir()) == ["data_20240103-000000.json", created.name]


def test_import_script_prints_usage_on_bad_arguments(capsys):
    from scripts.import_advertisements import main

    assert main(["import_advertisements.py", "leads.csv"]) == 2
    assert "python scripts/import_advertisements.py" in capsys.readouterr().out
