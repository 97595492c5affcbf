import struct

import pytest

from grimarz import __main__ as cli


def _write_archive(path, strings: list[bytes], records: list[tuple[int, bytes]]) -> None:
    string_table = struct.pack("<I", len(strings)) + b"".join(
        struct.pack("<I", len(s)) + s for s in strings
    )
    record_table = b"".join(
        struct.pack("<II", idx, len(rtype)) + rtype + struct.pack("<IIIQ", 10, 5, 8, 1)
        for idx, rtype in records
    )
    record_start = 24 + len(string_table)
    header = struct.pack(
        "<HHIIIII", 2, 3, record_start, len(record_table), len(records), 24, len(string_table)
    )
    path.write_bytes(header + string_table + record_table)


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "_configure_logging", lambda level: None)


class TestMain:
    def test_lists_records(self, tmp_path, capsys):
        archive = tmp_path / "database.arz"
        _write_archive(archive, [b"records/items/sword.dbr"], [(0, b"Item")])

        assert cli.main([str(archive)]) == 0

        out = capsys.readouterr().out
        assert "Item\trecords/items/sword.dbr\toffset=10 size=5/8" in out
        assert "1 records" in out

    def test_missing_file(self, tmp_path, capsys):
        assert cli.main([str(tmp_path / "missing.arz")]) == cli.EXIT_IO
        assert cli.ERROR_IO in capsys.readouterr().err

    def test_directory_input(self, tmp_path, capsys):
        assert cli.main([str(tmp_path)]) == cli.EXIT_IO
        assert cli.ERROR_IO in capsys.readouterr().err

    def test_invalid_header(self, tmp_path, capsys):
        archive = tmp_path / "bad.arz"
        archive.write_bytes(struct.pack("<HH", 9, 3) + b"\x00" * 40)

        assert cli.main([str(archive)]) == cli.EXIT_INVALID_HEADER
        assert cli.ERROR_INVALID_HEADER in capsys.readouterr().err

    def test_invalid_string_index(self, tmp_path, capsys):
        archive = tmp_path / "dangling.arz"
        _write_archive(archive, [], [(0, b"Item")])

        assert cli.main([str(archive)]) == cli.EXIT_INVALID_STRING_INDEX
        assert "missing string #0" in capsys.readouterr().err

    def test_truncated_file(self, tmp_path, capsys):
        archive = tmp_path / "short.arz"
        _write_archive(archive, [b"a"], [(0, b"Item")])
        archive.write_bytes(archive.read_bytes()[:-4])

        assert cli.main([str(archive)]) == cli.EXIT_ERROR
        assert "truncated" in capsys.readouterr().err

    def test_requires_input(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 2
