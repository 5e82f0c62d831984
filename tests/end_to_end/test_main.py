import os
import sys
from unittest.mock import patch

import pytest
from methdiff.constants import EXIT_ERROR, EXIT_OK
from methdiff.main import main

from ..util import get_data, glob_exists, glob_not_exists


def read_output(filename):
    result = []
    with open(filename) as fh:
        for line in fh.readlines():
            chrom, start, end, label, probability = line.rstrip('\n').split('\t')
            result.append((chrom, int(start), int(end), label, float(probability)))
    return result


class TestHelpMenu:
    def test_main(self):
        with patch.object(sys, 'argv', ['methdiff', '-h']):
            with pytest.raises(SystemExit) as err:
                main()
            assert err.value.code == 0

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as err:
            main(['--version'])
        assert err.value.code == 0
        assert capsys.readouterr().out.startswith('methdiff version ')

    def test_no_inputs(self, capsys):
        with patch.object(sys, 'argv', ['methdiff']):
            assert main() == EXIT_OK
        assert 'usage: methdiff' in capsys.readouterr().err

    def test_single_input(self, capsys):
        assert main([get_data('sample_a.bed')]) == EXIT_OK
        assert 'usage: methdiff' in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        with pytest.raises(SystemExit) as err:
            main([get_data('sample_a.bed'), str(tmp_path / 'missing.bed')])
        assert err.value.code == 2


class TestCompare:
    def run_main(self, tmp_path, *args):
        outputfile = str(tmp_path / 'output.bed')
        assert main(list(args) + ['-o', outputfile]) == EXIT_OK
        assert glob_exists(outputfile, strict=True)
        return read_output(outputfile)

    def test_bed(self, tmp_path):
        result = self.run_main(tmp_path, get_data('sample_a.bed'), get_data('sample_b.bed'))
        assert [row[:4] for row in result] == [
            ('chr1', 100, 101, 'CpG:10:10'),
            ('chr2', 50, 51, 'CpG:10:10'),
        ]
        assert result[0][4] == pytest.approx(1 - 3147 / 705432, abs=1e-6)
        assert result[1][4] == 0.5

    def test_reversed_inputs(self, tmp_path):
        forward = self.run_main(tmp_path, get_data('sample_a.bed'), get_data('sample_b.bed'))
        reverse = self.run_main(tmp_path, get_data('sample_b.bed'), get_data('sample_a.bed'))
        assert [row[:2] for row in forward] == [row[:2] for row in reverse]
        for row_f, row_r in zip(forward, reverse):
            assert row_f[4] + row_r[4] == pytest.approx(1, abs=1e-5)

    def test_meth(self, tmp_path):
        bed = self.run_main(tmp_path, get_data('sample_a.bed'), get_data('sample_b.bed'))
        meth = self.run_main(tmp_path, get_data('sample_a.meth'), get_data('sample_b.meth'))
        assert meth == bed

    def test_input_format(self, tmp_path):
        result = self.run_main(
            tmp_path,
            get_data('sample_a.meth'),
            get_data('sample_b.meth'),
            '--input_format',
            'meth',
        )
        assert len(result) == 2

    def test_all_loci(self, tmp_path):
        result = self.run_main(
            tmp_path, get_data('sample_a.bed'), get_data('sample_b.bed'), '-A'
        )
        assert [row[:4] for row in result] == [
            ('chr1', 100, 101, 'CpG:10:10'),
            ('chr1', 200, 201, 'CpG:0:10'),
            ('chr1', 300, 301, 'CpG:4:0'),
            ('chr2', 50, 51, 'CpG:10:10'),
            ('chr3', 10, 11, 'CpG:6:0'),
        ]
        for row in result:
            assert 0 <= row[4] <= 1

    def test_all_loci_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv('METHDIFF_ALL_LOCI', 'true')
        result = self.run_main(tmp_path, get_data('sample_a.bed'), get_data('sample_b.bed'))
        assert len(result) == 5

    def test_no_all_overrides_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv('METHDIFF_ALL_LOCI', 'true')
        result = self.run_main(
            tmp_path, get_data('sample_a.bed'), get_data('sample_b.bed'), '--no-all'
        )
        assert [row[:2] for row in result] == [('chr1', 100), ('chr2', 50)]

    def test_all_and_no_all_exclusive(self):
        with pytest.raises(SystemExit) as err:
            main([get_data('sample_a.bed'), get_data('sample_b.bed'), '-A', '--no-all'])
        assert err.value.code == 2

    def test_counts_label(self, tmp_path):
        result = self.run_main(
            tmp_path,
            get_data('sample_a.bed'),
            get_data('sample_b.bed'),
            '--label_format',
            'counts',
        )
        assert [row[3] for row in result] == ['CpG:8:2:2:8', 'CpG:5:5:5:5']

    def test_label_format_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv('METHDIFF_LABEL_FORMAT', 'counts')
        result = self.run_main(tmp_path, get_data('sample_a.bed'), get_data('sample_b.bed'))
        assert result[0][3] == 'CpG:8:2:2:8'

    def test_pseudocount(self, tmp_path):
        default = self.run_main(tmp_path, get_data('sample_a.bed'), get_data('sample_b.bed'))
        smoothed = self.run_main(
            tmp_path, get_data('sample_a.bed'), get_data('sample_b.bed'), '-p', '5'
        )
        assert 0.5 < smoothed[0][4] < default[0][4]

    def test_stdout(self, capsys):
        assert main([get_data('sample_a.bed'), get_data('sample_b.bed')]) == EXIT_OK
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert lines == ['chr1\t100\t101\tCpG:10:10\t0.995539', 'chr2\t50\t51\tCpG:10:10\t0.5']

    def test_log_file(self, tmp_path):
        logfile = str(tmp_path / 'run.log')
        self.run_main(
            tmp_path, get_data('sample_a.bed'), get_data('sample_b.bed'), '-v', '--log', logfile
        )
        with open(logfile) as fh:
            content = fh.read()
        assert 'CPG COUNT A: 5' in content
        assert 'CPG COUNT B: 5' in content
        assert '[INFO]' in content


class TestErrors:
    def test_unsorted(self, tmp_path):
        outputfile = str(tmp_path / 'output.bed')
        logfile = str(tmp_path / 'run.log')
        returncode = main(
            [get_data('unsorted.bed'), get_data('sample_b.bed'), '-o', outputfile, '--log', logfile]
        )
        assert returncode == EXIT_ERROR
        assert glob_not_exists(outputfile)
        with open(logfile) as fh:
            assert 'CpGs not sorted' in fh.read()

    def test_unsorted_second_file(self, tmp_path):
        outputfile = str(tmp_path / 'output.bed')
        returncode = main(
            [get_data('sample_a.bed'), get_data('unsorted.bed'), '-o', outputfile]
        )
        assert returncode == EXIT_ERROR
        assert not os.path.exists(outputfile)

    def test_malformed(self, tmp_path):
        outputfile = str(tmp_path / 'output.bed')
        returncode = main(
            [get_data('malformed.bed'), get_data('sample_b.bed'), '-o', outputfile]
        )
        assert returncode == EXIT_ERROR
        assert not os.path.exists(outputfile)

    def test_unknown_format(self):
        assert main([get_data('unknown.txt'), get_data('sample_b.bed')]) == EXIT_ERROR

    def test_out_of_memory(self, tmp_path):
        outputfile = str(tmp_path / 'output.bed')
        logfile = str(tmp_path / 'run.log')
        with patch('methdiff.main.read_calls', side_effect=MemoryError):
            returncode = main(
                [get_data('sample_a.bed'), get_data('sample_b.bed'), '-o', outputfile, '--log', logfile]
            )
        assert returncode == EXIT_ERROR
        assert not os.path.exists(outputfile)
        with open(logfile) as fh:
            assert 'could not allocate memory' in fh.read()

    def test_negative_pseudocount(self):
        with pytest.raises(SystemExit) as err:
            main([get_data('sample_a.bed'), get_data('sample_b.bed'), '-p', '-1'])
        assert err.value.code == 2
