from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from bizcard_pptx.cli import main
from bizcard_pptx.config import Config, ProcessingOptions


def test_processing_options_from_config(tmp_path) -> None:
    config = Config.from_dict({
        'paths': {'project_root': '.', 'output_dir': 'out'},
        'processing': {'max_batch_size': 20, 'max_workers': 3, 'batch_timeout_seconds': 30},
    }, config_dir=tmp_path)

    options = config.processing_options

    assert options.max_batch_size == 20
    assert options.max_workers == 3
    assert options.batch_timeout_seconds == 30.0
    assert options.max_template_file_size_mb == 50
    assert options.output_dir == tmp_path.resolve() / 'out'


def test_processing_options_are_range_checked() -> None:
    config = Config.from_dict({'processing': {'max_batch_size': 0}})
    with pytest.raises(ValueError, match="max_batch_size"):
        config.processing_options

    with pytest.raises(ValueError, match="max_workers"):
        ProcessingOptions(max_workers=0).validate()


def test_formatting_policy_from_config() -> None:
    config = Config.from_dict({
        'formatting': {'mobile': {'national_prefix': '011'}, 'empty_values': ['', 'n/a']},
        'position_mapping': {'수석': 'Principal', '대표': 'Chief Executive'},
        'line_removal': {'labels': {'fax': ['Telefax']}},
    })

    policy = config.formatting_policy

    assert policy.mobile_prefix == '011'
    assert policy.empty_values == ('', 'n/a')
    assert policy.position_mapping['수석'] == 'Principal'
    assert policy.position_mapping['대표'] == 'Chief Executive'
    assert policy.position_mapping['부대표'] == 'Vice President'
    assert policy.removal_labels['fax'] == ('Telefax',)
    assert policy.removal_labels['mobile'] == ('M.', 'Mobile')


def test_config_file_paths_resolve_against_project_root(tmp_path) -> None:
    config_dir = tmp_path / 'configs'
    config_dir.mkdir()
    config_path = config_dir / 'config.yaml'
    config_path.write_text(
        "paths:\n"
        "  project_root: '..'\n"
        "  template: 'card.pptx'\n"
        "  records: 'people.yaml'\n",
        encoding='utf-8',
    )

    config = Config(str(config_path))

    assert config.template_path == tmp_path.resolve() / 'card.pptx'
    assert config.output_dir is None
    with pytest.raises(FileNotFoundError):
        config.validate_paths()


def test_sample_config_loads() -> None:
    config = Config(str(Path(__file__).resolve().parents[1] / 'configs' / 'config.yaml'))

    assert config.processing_options.max_workers == 4
    assert config.formatting_policy.extension_prefix == '3210'
    assert config.formatting_policy.mobile_prefix == '010'


def test_cli_writes_sample_files(tmp_path) -> None:
    template = tmp_path / 'basic.pptx'
    workbook = tmp_path / 'people.xlsx'

    assert main(['--create-template', 'basic', str(template)]) == 0
    assert main(['--create-import-template', str(workbook)]) == 0
    assert template.read_bytes().startswith(b'PK\x03\x04')
    assert workbook.read_bytes().startswith(b'PK\x03\x04')

    assert main(['--create-template', 'fancy', str(tmp_path / 'x.pptx')]) == 1


def test_cli_generates_archive(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    template = tmp_path / 'card.pptx'
    records = tmp_path / 'people.yaml'
    out = tmp_path / 'out'
    assert main(['--create-template', 'qrcode', str(template)]) == 0
    records.write_text(
        "- name: Ann\n  company: Acme\n  email: ann@acme.test\n"
        "- name: Ben\n  company: Acme\n  email: ben@acme.test\n",
        encoding='utf-8',
    )

    code = main([
        '--template', str(template),
        '--records', str(records),
        '--output-dir', str(out),
        '--workers', '2',
    ])

    assert code == 0
    (archive,) = out.glob('BusinessCards_*.zip')
    with zipfile.ZipFile(archive) as zf:
        assert len(zf.namelist()) == 2


def test_cli_missing_inputs_fail(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(['--template', str(tmp_path / 'missing.pptx'), '--records', str(tmp_path / 'none.yaml')]) == 1
