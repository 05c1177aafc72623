"""Tests for the linkview command line."""

import pytest

from linkview.cli import build_parser, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv('LINKVIEW_DATA_DIR', raising=False)
    monkeypatch.delenv('LINKVIEW_LOG_LEVEL', raising=False)


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args(['/data'])
        assert args.view == 'timeseries'
        assert args.anomaly_sort == 'original'
        assert not args.sort

    def test_rejects_bad_time(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['/data', '--start', 'yesterday'])


class TestMain:

    def test_list(self, data_dir, capsys):
        main([str(data_dir), '--list'])
        out = capsys.readouterr().out
        assert 'Fields (3):' in out
        assert '  1: cpu' in out
        assert '  3: io' in out

    def test_missing_dir(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / 'nowhere')])
        assert exc.value.code == 1
        assert 'does not exist' in capsys.readouterr().out

    def test_no_dir(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1

    def test_data_dir_from_env(self, data_dir, monkeypatch, capsys):
        monkeypatch.setenv('LINKVIEW_DATA_DIR', str(data_dir))
        main(['--list'])
        assert '  2: mem' in capsys.readouterr().out

    def test_matrix_to_file(self, data_dir, tmp_path, capsys):
        output = tmp_path / 'granger.png'
        main([str(data_dir), '--view', 'granger', '--sort', '-o', str(output)])
        out = capsys.readouterr().out
        assert output.exists()
        assert 'Granger Test Analysis: 3 entries' in out
        assert f'Saved: {output}' in out

    def test_anomalies_with_brush(self, data_dir, tmp_path, capsys):
        output = tmp_path / 'anomalies.png'
        main([
            str(data_dir), '--view', 'anomalies',
            '--start', '2024-01-01 10:00:00', '--end', '2024-01-01 10:05:00',
            '--anomaly-sort', 'desc', '--search', '3',
            '-o', str(output),
        ])
        out = capsys.readouterr().out
        assert 'Selected Time: 2024-01-01 10:00:00 - 2024-01-01 10:05:00' in out
        assert 'Zero Value events:   2' in out
        assert 'Sharp Change events: 0' in out
        assert 'Field 3: io' in out
        assert output.exists()

    def test_empty_matrix_is_an_error(self, data_dir, capsys):
        (data_dir / 'similar_time_series_pairs_new.csv').unlink()
        with pytest.raises(SystemExit) as exc:
            main([str(data_dir), '--view', 'dtw', '-o', str(data_dir / 'dtw.png')])
        assert exc.value.code == 1
        assert 'Error:' in capsys.readouterr().out

    def test_malformed_file_is_an_error(self, data_dir, capsys):
        (data_dir / 'grangerTest_new.csv').write_text("Field1,Field2,Lag\ncpu,mem,1\n")
        with pytest.raises(SystemExit) as exc:
            main([str(data_dir), '--list'])
        assert exc.value.code == 1
        assert 'missing column(s) P-Value' in capsys.readouterr().out

    def test_ragged_and_empty_files_load(self, data_dir, capsys):
        (data_dir / 'grangerTest_new.csv').write_text("Field1,Field2,Lag,P-Value\ncpu,mem,1,0.001,x\n")
        (data_dir / 'sharp_change_periods.csv').write_text("")
        main([str(data_dir), '--list'])
        assert 'Fields (3):' in capsys.readouterr().out
