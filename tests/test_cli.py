from __future__ import annotations

import csv
from pathlib import Path

import pytest

from cyclemat.main import main


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_cli_reports_cyclic_graph(tmp_path, capsys):
    path = _write(tmp_path, "ring.csv", "0,1,0\n0,0,1\n1,0,0\n")
    main(["--file-location", path, "--workers", "2"])
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Original matrix:"
    assert out[1] == "[[0 1 0]"
    assert out[-2] == "Is it cyclic?"
    assert out[-1] == "true"


def test_cli_reports_acyclic_graph(tmp_path, capsys):
    path = _write(tmp_path, "dag.csv", "0,1,0\n0,0,1\n0,0,0\n")
    main(["--file-location", path, "--batch-size", "4"])
    out = capsys.readouterr().out.splitlines()
    assert out[-1] == "false"


def test_cli_without_file_does_nothing(capsys):
    main([])
    assert capsys.readouterr().out == ""


def test_cli_missing_file_exits_nonzero(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--file-location", str(tmp_path / "missing.csv")])
    assert exc.value.code == 2
    assert "[cyclemat] error" in capsys.readouterr().err


def test_cli_bad_cell_exits_nonzero(tmp_path, capsys):
    path = _write(tmp_path, "bad.csv", "0,a\n1,0\n")
    with pytest.raises(SystemExit) as exc:
        main(["--file-location", path])
    assert exc.value.code == 2
    assert "not an integer" in capsys.readouterr().err


def test_cli_non_square_input_warns_then_fails(tmp_path, capsys):
    path = _write(tmp_path, "wide.csv", "0,1,0\n0,0,1\n")
    with pytest.warns(RuntimeWarning, match="only square"):
        with pytest.raises(SystemExit) as exc:
            main(["--file-location", path])
    assert exc.value.code == 2
    assert "square adjacency matrix" in capsys.readouterr().err


def test_cli_config_and_trace(tmp_path, capsys):
    path = _write(tmp_path, "ring.csv", "0,1\n1,0\n")
    trace_out = tmp_path / "trace.csv"
    cfg = _write(
        tmp_path,
        "cfg.yaml",
        f"pipeline:\n  workers: 3\n  batch_size: 2\ntrace:\n  enabled: true\n  out: {trace_out}\n",
    )
    main(["--file-location", path, "--config", cfg])
    out = capsys.readouterr().out
    assert "true" in out.splitlines()
    with open(trace_out, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert sum(1 for r in rows if r["event"] == "worker_done") == 3


def test_cli_rejects_bad_config(tmp_path, capsys):
    path = _write(tmp_path, "ring.csv", "0,1\n1,0\n")
    cfg = _write(tmp_path, "cfg.yaml", "pipeline:\n  workers: 0\n")
    with pytest.raises(SystemExit) as exc:
        main(["--file-location", path, "--config", cfg])
    assert exc.value.code == 2
    assert "pipeline.workers" in capsys.readouterr().err


def test_cli_bundled_samples(capsys):
    data = Path(__file__).resolve().parents[1] / "data"
    cfg = str(data / "pipeline.yaml")
    main(["--file-location", str(data / "ring3.csv"), "--config", cfg])
    assert capsys.readouterr().out.splitlines()[-1] == "true"
    main(["--file-location", str(data / "chain3.csv"), "--config", cfg])
    assert capsys.readouterr().out.splitlines()[-1] == "false"


def test_cli_unwritable_trace_out_exits_nonzero(tmp_path, capsys):
    path = _write(tmp_path, "ring.csv", "0,1\n1,0\n")
    blocker = _write(tmp_path, "not_a_dir", "")
    main_args = ["--file-location", path, "--trace", "--trace-out", str(Path(blocker) / "trace.csv")]
    with pytest.raises(SystemExit) as exc:
        main(main_args)
    assert exc.value.code == 2
    assert "[cyclemat] error" in capsys.readouterr().err
