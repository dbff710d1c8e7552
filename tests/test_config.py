# tests/test_config.py
"""
Tests for Aspect.toml loading and project root detection.
"""

import pytest

from aspect_weaver.config import (
    DEFAULT_COMMAND,
    Pointcut,
    WeaverSettings,
    find_project_root,
    load_config,
    parse_config,
)
from aspect_weaver.errors import ConfigError


CONFIG = '''
name = "tracing"

[[pointcuts]]
condition = "call(read)"
advice = '{ log!("read"); $ }'

[[pointcuts]]
condition = "fn_body(handle_*)"
advice = "/*entered*/$"
'''


class TestFindProjectRoot:

    def test_accepts_directory_with_manifest(self, project):
        assert find_project_root(project) == project.resolve()

    def test_defaults_to_cwd(self, project, monkeypatch):
        monkeypatch.chdir(project)
        assert find_project_root() == project.resolve()

    def test_rejects_directory_without_manifest(self, tmp_path):
        with pytest.raises(ConfigError) as info:
            find_project_root(tmp_path)
        assert "Cargo.toml" in str(info.value)
        assert info.value.code == "AW-1001"


class TestParseConfig:

    def test_pointcuts_in_file_order(self):
        config = parse_config(CONFIG)
        assert config.name == "tracing"
        assert config.pointcuts == [
            Pointcut("call(read)", '{ log!("read"); $ }'),
            Pointcut("fn_body(handle_*)", "/*entered*/$"),
        ]
        assert config.settings == WeaverSettings()

    def test_no_pointcuts(self):
        assert parse_config('name = "empty"').pointcuts == []

    def test_weaver_settings(self):
        config = parse_config(
            'name = "x"\n'
            '[weaver]\n'
            'source_dir = "lib"\n'
            'placeholder = "@"\n'
            'command = ["echo", "{condition}"]\n'
        )
        assert config.settings.source_dir == "lib"
        assert config.settings.placeholder == "@"
        assert config.settings.command == ("echo", "{condition}")
        assert config.settings.build_dir == "target"

    def test_default_command(self):
        assert parse_config('name = "x"').settings.command == DEFAULT_COMMAND

    def test_unknown_weaver_key_is_only_a_warning(self, caplog):
        config = parse_config('name = "x"\n[weaver]\ncolour = "red"\n')
        assert config.settings == WeaverSettings()
        assert "colour" in caplog.text

    @pytest.mark.parametrize("text", [
        "name = ",
        "pointcuts = []",
        "name = 3",
        'name = "x"\npointcuts = "nope"',
        'name = "x"\n[[pointcuts]]\ncondition = "c"',
        'name = "x"\n[[pointcuts]]\ncondition = "c"\nadvice = 1',
        'name = "x"\nweaver = 1',
        'name = "x"\n[weaver]\ncommand = []',
        'name = "x"\n[weaver]\ncommand = ["a", 1]',
    ])
    def test_invalid_configs(self, text):
        with pytest.raises(ConfigError):
            parse_config(text)


class TestLoadConfig:

    def test_reads_from_root(self, project, write_config):
        write_config(CONFIG)
        assert len(load_config(project).pointcuts) == 2

    def test_missing_file(self, project):
        with pytest.raises(ConfigError):
            load_config(project)

    def test_custom_filename(self, project):
        (project / "Other.toml").write_text('name = "o"', encoding="utf-8")
        assert load_config(project, "Other.toml").name == "o"
