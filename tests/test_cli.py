import json

from typer.testing import CliRunner

from player_world_lock.cli import app

runner = CliRunner()


def make_world(tmp_path, **overrides):
    lockdir = tmp_path / "locks"
    lockdir.mkdir()
    config = {"instance_name": "home", "lock_provider": "files"}
    config.update(overrides)
    (tmp_path / "player_world_lock.json").write_text(json.dumps(config), encoding="utf-8")
    return ["--world", str(tmp_path), "--lockdir", str(lockdir)], lockdir


def test_providers_lists_backends(tmp_path):
    result = runner.invoke(app, ["--world", str(tmp_path), "providers"])
    assert result.exit_code == 0
    assert result.output.split() == ["files", "http", "worlddir"]


def test_claim_then_check(tmp_path):
    opts, lockdir = make_world(tmp_path)
    result = runner.invoke(app, opts + ["claim", "alice", "other"])
    assert result.exit_code == 0, result.output
    assert (lockdir / "alice.txt").read_bytes() == b"other\n"

    result = runner.invoke(app, opts + ["check", "alice"])
    assert result.exit_code == 0
    assert "owned by other" in result.output


def test_check_rejects_unsafe_player(tmp_path):
    opts, _ = make_world(tmp_path)
    result = runner.invoke(app, opts + ["check", "a.b"])
    assert result.exit_code != 0


def test_admit_denies_unclaimed_when_not_lock_master(tmp_path):
    opts, lockdir = make_world(tmp_path)
    result = runner.invoke(app, opts + ["admit", "alice"])
    assert result.exit_code == 1
    assert "starting server" in result.output
    assert not (lockdir / "alice.txt").exists()


def test_admit_claims_when_lock_master(tmp_path):
    opts, lockdir = make_world(tmp_path, is_lock_master=True)
    result = runner.invoke(app, opts + ["admit", "alice"])
    assert result.exit_code == 0
    assert (lockdir / "alice.txt").read_bytes() == b"home\n"


def test_broken_config_exits_with_error(tmp_path):
    opts, _ = make_world(tmp_path, lock_provider="nope")
    result = runner.invoke(app, opts + ["check", "alice"])
    assert result.exit_code == 1
    assert "nope" in result.output


def test_inspect_reports_split_and_verdict(tmp_path):
    record = tmp_path / "alice.txt"
    record.write_bytes(b"abc\nxyz")
    result = runner.invoke(app, ["inspect", str(record)])
    assert result.exit_code == 1
    assert "has_newline: True" in result.output
    assert "spurious" in result.output

    record.write_bytes(b"abc")
    result = runner.invoke(app, ["inspect", str(record)])
    assert result.exit_code == 0
    assert "Transient" in result.output


def test_inspect_missing_file_is_usage_error(tmp_path):
    result = runner.invoke(app, ["inspect", str(tmp_path / "absent.txt")])
    assert result.exit_code == 2
    assert not isinstance(result.exception, FileNotFoundError)
