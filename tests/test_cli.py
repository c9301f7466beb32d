import io

from rscan.cli import COMMANDS, dispatch, main, shell
from rscan.export import read_csv
from rscan.session import Session


def test_scan_command(fasta_file, tmp_path, capsys):
    out = tmp_path / "scores.csv"
    code = main([
        "scan", str(fasta_file), "--groups", "0..1 2-3",
        "--consensus", "low", "--kb", "5", "--window", "5", "--no-color", "--csv", str(out),
    ])
    assert code == 0
    stdout = capsys.readouterr().out
    assert "Page #2" in stdout
    assert "Page #3" not in stdout
    assert "\033[" not in stdout
    assert len(read_csv(out)) == 4


def test_scan_command_reports_errors(fasta_file, capsys):
    assert main(["scan", str(fasta_file), "--groups", "0..9"]) == 1
    assert "out of range" in capsys.readouterr().err


def test_scan_command_colored(fasta_file, capsys):
    assert main(["scan", str(fasta_file), "--ranges", "0", "0.2", "0.4", "0.6"]) == 0
    assert "\033[" in capsys.readouterr().out


def test_dispatch_table(fasta_file):
    session = Session()
    assert dispatch(session, f"open {fasta_file}") == "4 sequences, 10 positions"
    assert dispatch(session, "set_groups 0..1 2,3") == "2 groups"
    assert dispatch(session, "con high") == "ka = 10.0"
    assert dispatch(session, "asp forbid") == "kb = 20.0"
    assert dispatch(session, 'set_formula "1 - @ka*(1-a)"') == "1 - ka*(1-a)"
    assert dispatch(session, "color_ranges 0.1 0.2 0.3 0.4") == "color ranges = 0.1, 0.2, 0.3, 0.4"
    assert dispatch(session, "groups").startswith("Group 0: [0, 1]")
    assert dispatch(session, "   ") is None
    assert "set_groups" in dispatch(session, "man")


def test_every_command_has_usage():
    for name, command in COMMANDS.items():
        assert command.usage.split()[0] == name


def test_shell_session(fasta_file, tmp_path, capsys):
    out = tmp_path / "s.csv"
    script = io.StringIO(
        f"open {fasta_file}\n"
        "labels\n"
        "ka many\n"
        "bogus\n"
        "scan\n"
        f"export {out}\n"
        "quit\n"
        "labels\n"
    )
    shell(Session(), script)
    stdout = capsys.readouterr().out
    assert "3. s3 fourth" in stdout
    assert "error: could not convert" in stdout
    assert "error: unknown command 'bogus'" in stdout
    assert "Page #1" in stdout
    assert out.exists()


def test_scan_command_rejects_non_utf8_file(tmp_path, capsys):
    f = tmp_path / "bad.fasta"
    f.write_bytes(b">a\nAC\xff\xfeGT\n>b\nACGTAC\n")
    assert main(["scan", str(f)]) == 1
    assert "not a text FASTA file" in capsys.readouterr().err
