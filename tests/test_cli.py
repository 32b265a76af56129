import pytest

from lincrypt.cli import build_parser, main


def test_parser_accepts_hex_masks():
    args = build_parser().parse_args(['--alpha', '0x0b00', '--gamma', '0x5050', '--samples', '100'])
    assert args.alpha == 0x0B00
    assert args.gamma == 0x5050
    assert args.samples == 100
    assert args.check_pairs == 30


@pytest.mark.parametrize("mask", ['0x10000', '-1', 'zz'])
def test_parser_rejects_bad_masks(mask, capsys):
    with pytest.raises(SystemExit):
        build_parser().parse_args(['--alpha', mask])
    assert "--alpha" in capsys.readouterr().err


def test_main_without_samples_is_inconclusive(capsys):
    assert main(['--samples', '0', '--seed', '0', '--top', '256']) == 1
    out = capsys.readouterr().out
    assert "attack inconclusive" in out
    assert "decrypted" not in out


def test_main_runs_attack(capsys):
    status = main(['--samples', '3000', '--seed', '0', '--show-lat', '--top', '256'])
    out = capsys.readouterr().out
    # with every candidate extended the true key always passes verification
    assert status == 0
    assert "LAT:" in out
    assert "real master key" in out
    assert "decrypted       = 'Secret message'" in out


def test_main_rejects_bad_rounds(capsys):
    assert main(['--rounds', '1']) == 2
    assert "rounds must be" in capsys.readouterr().err
