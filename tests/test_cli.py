"""Tests for the xzadvisor command line."""

import json
import lzma

import pytest

from xzadvisor.__main__ import main


@pytest.fixture
def text_file(tmp_path):
    path = tmp_path / "log.txt"
    path.write_bytes(b"".join(b"2024-01-01 12:00:%02d INFO request served\n" % (i % 60) for i in range(2000)))
    return path


@pytest.fixture
def xz_file(tmp_path, text_file):
    path = tmp_path / "log.txt.xz"
    path.write_bytes(lzma.compress(text_file.read_bytes()))
    return path


class TestCommands:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_predict(self, text_file, capsys):
        assert main(["predict", str(text_file), "-s", "speed"]) == 0
        assert "Prediction" in capsys.readouterr().out

    def test_predict_missing(self, tmp_path):
        assert main(["predict", str(tmp_path / "missing")]) == 1

    def test_optimize(self, text_file, capsys):
        assert main(["optimize", str(text_file), "-s", "speed"]) == 0
        out = capsys.readouterr().out
        assert "Optimization" in out
        assert "Trials" in out

    def test_plan(self, text_file, capsys):
        assert main(["plan", str(text_file)]) == 0
        assert "Parallel Plan" in capsys.readouterr().out

    def test_recommend(self, text_file, capsys):
        assert main(["recommend", str(text_file), "-s", "memory-efficient"]) == 0
        assert "Recommendation" in capsys.readouterr().out

    def test_recommend_missing(self, tmp_path):
        assert main(["recommend", str(tmp_path / "missing")]) == 1

    def test_compress(self, text_file, tmp_path):
        out = tmp_path / "out.xz"
        assert main(["compress", str(text_file), "-o", str(out), "-s", "speed"]) == 0
        assert lzma.decompress(out.read_bytes()) == text_file.read_bytes()

    def test_invalid_strategy(self, text_file):
        with pytest.raises(SystemExit):
            main(["compress", str(text_file), "-o", "x.xz", "-s", "warp"])


class TestIntegrityCommands:
    def test_verify_json(self, xz_file, capsys):
        assert main(["verify", str(xz_file), "--json"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["integrity"] == "ok"
        assert report["ok"] is True

    def test_verify_corrupted(self, xz_file, tmp_path):
        bad = tmp_path / "bad.xz"
        bad.write_bytes(xz_file.read_bytes()[:-10])
        assert main(["verify", str(bad)]) == 1

    def test_recover(self, xz_file, text_file, tmp_path, capsys):
        out = tmp_path / "recovered.txt"
        assert main(["recover", str(xz_file), "-o", str(out), "-m", "aggressive"]) == 0
        assert text_file.read_bytes().startswith(out.read_bytes())
        assert "Recovery Statistics" in capsys.readouterr().out

    def test_recover_missing(self, tmp_path):
        assert main(["recover", str(tmp_path / "missing"), "-o", str(tmp_path / "o")]) == 1

    def test_repair(self, xz_file, text_file, tmp_path):
        damaged = tmp_path / "damaged.xz"
        damaged.write_bytes(b"junk" + xz_file.read_bytes())
        out = tmp_path / "repaired.txt"
        assert main(["repair", str(damaged), "-o", str(out)]) == 0
        assert out.read_bytes() == text_file.read_bytes()


class TestBenchmarkCommand:
    def test_benchmark_with_html(self, text_file, tmp_path, capsys):
        html = tmp_path / "report.html"
        assert main(["benchmark", str(text_file), "--presets", "1,2", "--html", str(html)]) == 0
        out = capsys.readouterr().out
        assert "Benchmark" in out
        assert html.exists()
        assert "log.txt" in html.read_text()

    def test_invalid_presets(self, text_file):
        assert main(["benchmark", str(text_file), "--presets", "one,two"]) == 1

    def test_no_valid_preset(self, text_file):
        assert main(["benchmark", str(text_file), "--presets", "12"]) == 1

    def test_empty_input(self, tmp_path):
        path = tmp_path / "empty"
        path.write_bytes(b"")
        assert main(["benchmark", str(path)]) == 1
