import gzip
from pathlib import Path

import pytest

from logsorter.logsorter import LogSorterApplication, main, make_argument_parser
from logsorter.merging import MERGE_STRATEGIES, InsertionMerger

from .logsorter_testing import LogSorterTestApp
from .util import contains_list, sample_file

SERVICE_A = sample_file("service_a.log")
SERVICE_B = sample_file("service_b.log")

MERGED_A_B = [
    '2023-07-14 08:00:01.000 WARN   Connection lost due to timeout',
    '2023-07-14 08:00:01.000 INFO   Request processed successfully',
    '2023-07-14 08:00:03.000 INFO   User authentication succeeded',
    '2023-07-14 08:00:04.250 ERROR  Request processed unsuccessfully',
    'Something went wrong',
    'Traceback (last line is latest):',
    '    sample.py: line 32',
    '        divide(100, 0)',
    'ZeroDivisionError: division by zero',
    '2023-07-14 08:00:06.000 INFO   User authentication failed',
    '2023-07-14 08:00:06.000 DEBUG  Starting data synchronization',
    '2023-07-14 08:00:08.500 INFO   Processing incoming request',
    '2023-07-14 08:00:11.000 INFO   Processing incoming request',
]


@pytest.mark.parametrize("strategy", list(MERGE_STRATEGIES))
def test_merging(tmp_path, strategy: str):
    log_sorter = LogSorterTestApp([SERVICE_A, SERVICE_B], tmp_path / "merged.log", strategy=strategy)
    merged_lines = log_sorter()

    assert merged_lines == MERGED_A_B
    assert log_sorter.app.entry_counts == {SERVICE_A: 4, SERVICE_B: 4}


def test_merging_file_order_breaks_ties(tmp_path):
    merged_lines = LogSorterTestApp([SERVICE_B, SERVICE_A], tmp_path / "merged.log")()

    assert contains_list(merged_lines, [
        '2023-07-14 08:00:01.000 INFO   Request processed successfully',
        '2023-07-14 08:00:01.000 WARN   Connection lost due to timeout',
    ])
    assert contains_list(merged_lines, [
        '2023-07-14 08:00:06.000 DEBUG  Starting data synchronization',
        '2023-07-14 08:00:06.000 INFO   User authentication failed',
    ])


def test_merging_with_legacy_format(tmp_path):
    merged_lines = LogSorterTestApp([SERVICE_B], tmp_path / "merged.log", legacy_format=True)()

    assert merged_lines == [
        '2023-7-14 8:0:1.0 INFO   Request processed successfully',
        '2023-7-14 8:0:3.0 INFO   User authentication succeeded',
        '2023-7-14 8:0:6.0 DEBUG  Starting data synchronization',
        '2023-7-14 8:0:8.500 INFO   Processing incoming request',
    ]


def test_merged_output_merges_again(tmp_path):
    first_output = tmp_path / "merged.log"
    LogSorterTestApp([SERVICE_A, SERVICE_B], first_output)()

    # re-merging canonical output gives back the same output
    merged_lines = LogSorterTestApp([str(first_output)], tmp_path / "merged_again.log")()
    assert merged_lines == MERGED_A_B


def test_file_without_timestamps(tmp_path):
    log_sorter = LogSorterTestApp(
        [sample_file("no_timestamps.log"), SERVICE_B], tmp_path / "merged.log"
    )
    merged_lines = log_sorter()

    assert len(merged_lines) == 4
    assert log_sorter.app.entry_counts[sample_file("no_timestamps.log")] == 0


def test_gzip_input(tmp_path):
    gzip_file = tmp_path / "service_b.log.gz"
    with gzip.open(gzip_file, "wb") as gz_out:
        gz_out.write(Path(SERVICE_B).read_bytes())

    merged_lines = LogSorterTestApp([SERVICE_A, str(gzip_file)], tmp_path / "merged.log")()
    assert merged_lines == MERGED_A_B


def test_csv_export(tmp_path):
    csv_file = tmp_path / "merged.csv"
    LogSorterTestApp([SERVICE_B], tmp_path / "merged.log", csv=str(csv_file))()

    csv_lines = csv_file.read_text(encoding="utf-8").splitlines()
    assert csv_lines[0] == "timestamp,message"
    assert csv_lines[1] == "2023-07-14 08:00:01.000,INFO   Request processed successfully"
    assert len(csv_lines) == 5


def test_malformed_timestamp_writes_nothing(tmp_path):
    output_file = tmp_path / "merged.log"
    log_sorter = LogSorterTestApp([SERVICE_A, sample_file("malformed.log")], output_file)

    with pytest.raises(ValueError, match="malformed timestamp '2023-13-45 08:00:03.000'"):
        log_sorter()

    assert not output_file.exists()
    assert list(tmp_path.iterdir()) == []


def test_missing_input_file(tmp_path):
    log_sorter = LogSorterTestApp([str(tmp_path / "missing.log")], tmp_path / "merged.log")

    with pytest.raises(FileNotFoundError, match="missing.log"):
        log_sorter()


def test_missing_output_directory(tmp_path):
    log_sorter = LogSorterTestApp([SERVICE_A], tmp_path / "no_such_dir" / "merged.log")

    with pytest.raises(NotADirectoryError, match="no_such_dir"):
        log_sorter()


def test_missing_csv_directory_writes_nothing(tmp_path):
    output_file = tmp_path / "merged.log"
    log_sorter = LogSorterTestApp(
        [SERVICE_A], output_file, csv=str(tmp_path / "no_such_dir" / "merged.csv")
    )

    with pytest.raises(NotADirectoryError, match="CSV directory"):
        log_sorter()

    assert list(tmp_path.iterdir()) == []


def test_main_missing_csv_directory(tmp_path, capsys):
    output_file = tmp_path / "merged.log"
    with pytest.raises(SystemExit) as exc_info:
        main([SERVICE_A, str(output_file), "--csv", str(tmp_path / "no_such_dir" / "merged.csv")])

    assert exc_info.value.code == 1
    assert "does not exist" in capsys.readouterr().err
    assert not output_file.exists()


def test_parse_inputs():
    args = make_argument_parser().parse_args([SERVICE_A, SERVICE_B, "-"])
    app = LogSorterApplication(args)

    assert app.parse_inputs(args.files) == ("-", [SERVICE_A, SERVICE_B])

    with pytest.raises(ValueError, match="output file"):
        app.parse_inputs([SERVICE_A])


def test_custom_merger_factory(tmp_path):
    args = make_argument_parser().parse_args([SERVICE_A, SERVICE_B, str(tmp_path / "merged.log")])
    app = LogSorterApplication(args, merger_factory=InsertionMerger)

    assert app.run() == 8
    merger = app.merge_and_sort(app.parse_log_files([SERVICE_B]))
    assert isinstance(merger, InsertionMerger)
    assert len(merger) == 4


def test_main_writes_to_stdout(capsys):
    main([SERVICE_A, SERVICE_B, "-"])

    captured = capsys.readouterr()
    assert captured.out.splitlines() == MERGED_A_B
    assert captured.err == ""


def test_main_verbose(tmp_path, capsys):
    main([SERVICE_A, SERVICE_B, str(tmp_path / "merged.log"), "--verbose", "--strategy", "insertion"])

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Merged 8 log entries" in captured.err
    assert "Timing summary:" in captured.err


def test_main_reports_errors(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([SERVICE_A, sample_file("malformed.log"), str(tmp_path / "merged.log")])

    assert exc_info.value.code == 1
    assert "malformed timestamp" in capsys.readouterr().err
    assert not (tmp_path / "merged.log").exists()


@pytest.mark.parametrize(
    "argv",
    [
        [SERVICE_A],
        [SERVICE_A, "merged.log", "--strategy", "bubble"],
    ]
)
def test_main_rejects_bad_arguments(argv, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)

    assert exc_info.value.code == 2
    assert "error:" in capsys.readouterr().err


def test_main_missing_input(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([str(tmp_path / "missing.log"), str(tmp_path / "merged.log")])

    assert exc_info.value.code == 1
    assert "does not exist" in capsys.readouterr().err


def test_run_records_each_phase(tmp_path):
    log_sorter = LogSorterTestApp([SERVICE_A, SERVICE_B], tmp_path / "merged.log")
    log_sorter()

    assert set(log_sorter.app.timings.elapsed) == {"read", "split", "build", "merge", "write", "total"}
